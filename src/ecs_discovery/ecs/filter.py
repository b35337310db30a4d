"""Reduce described tasks to the set of peer node identifiers."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from ecs_discovery.address import (
    LocalIdentity,
    NodeId,
    format_address,
    is_self,
    static_identity,
)
from ecs_discovery.ecs.records import HealthStatus, NetworkInterfaceRecord, TaskRecord


def healthy(tasks: Iterable[TaskRecord]) -> Iterator[TaskRecord]:
    return (task for task in tasks if task.health_status is HealthStatus.HEALTHY)


def network_interfaces(tasks: Iterable[TaskRecord]) -> Iterator[NetworkInterfaceRecord]:
    return (
        iface
        for task in tasks
        for container in task.containers
        for iface in container.network_interfaces
    )


def filter_tasks(
    tasks: Iterable[TaskRecord],
    node_sname: str,
    identity: LocalIdentity,
) -> frozenset[NodeId]:
    """Node identifiers of every healthy task, excluding the local node.

    Tasks that are not ``HEALTHY`` and interfaces without an address are
    dropped silently; a task between state transitions reports exactly
    that. *identity* is resolved once per call.
    """
    nodes = (
        format_address(iface.private_ipv4_address, node_sname)
        for iface in network_interfaces(healthy(tasks))
        if iface.private_ipv4_address
    )
    local = static_identity(identity())
    return frozenset(node for node in nodes if not is_self(node, local))
