"""Normalized views of ``DescribeTasks`` results.

Parsing is lenient: a task, container or interface missing a field is
still produced, with the field set to its "not ready" value. Filtering
those out is the filter pipeline's job, not the parser's.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class HealthStatus(Enum):
    HEALTHY = "HEALTHY"
    UNHEALTHY = "UNHEALTHY"
    UNKNOWN = "UNKNOWN"

    @staticmethod
    def parse(raw: Any) -> HealthStatus:
        try:
            return HealthStatus(raw)
        except ValueError:
            return HealthStatus.UNKNOWN


@dataclass(frozen=True)
class NetworkInterfaceRecord:
    private_ipv4_address: str | None = None


@dataclass(frozen=True)
class ContainerRecord:
    network_interfaces: tuple[NetworkInterfaceRecord, ...] = ()


@dataclass(frozen=True)
class TaskRecord:
    """One described task: its ARN, health and containers.

    Examples
    --------
    >>> TaskRecord.from_response({"taskArn": "arn:t", "healthStatus": "HEALTHY"})
    TaskRecord(task_arn='arn:t', health_status=<HealthStatus.HEALTHY: 'HEALTHY'>, containers=())
    """

    task_arn: str | None
    health_status: HealthStatus = HealthStatus.UNKNOWN
    containers: tuple[ContainerRecord, ...] = ()

    @staticmethod
    def from_response(raw: Mapping[str, Any]) -> TaskRecord:
        return TaskRecord(
            task_arn=raw.get("taskArn"),
            health_status=HealthStatus.parse(raw.get("healthStatus")),
            containers=tuple(
                ContainerRecord(
                    network_interfaces=tuple(
                        NetworkInterfaceRecord(
                            private_ipv4_address=iface.get("privateIpv4Address"),
                        )
                        for iface in _mappings(container.get("networkInterfaces"))
                    )
                )
                for container in _mappings(raw.get("containers"))
            ),
        )


def _mappings(raw: Any) -> list[Mapping[str, Any]]:
    if not isinstance(raw, list):
        return []
    return [item for item in raw if isinstance(item, Mapping)]
