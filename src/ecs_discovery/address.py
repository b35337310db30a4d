"""Node identifiers and local identity.

A node identifier has the form ``<short-name>@<address>``. The local
process's own identifier is supplied through a ``LocalIdentity`` callable
so that self-exclusion can be tested without a running node.
"""

from __future__ import annotations

import socket
from collections.abc import Callable

type NodeId = str
type LocalIdentity = Callable[[], NodeId]


def format_address(ip_address: str, node_sname: str) -> NodeId:
    """Build the node identifier for *ip_address*.

    The address is used verbatim; it is not validated.

    Examples
    --------
    >>> format_address("10.0.1.5", "my-app")
    'my-app@10.0.1.5'
    """
    return f"{node_sname}@{ip_address}"


def is_self(candidate: NodeId, identity: LocalIdentity) -> bool:
    return candidate == identity()


def static_identity(node_id: NodeId) -> LocalIdentity:
    """Identity that always reports *node_id*."""

    def identity() -> NodeId:
        return node_id

    return identity


def hostname_identity(node_sname: str) -> LocalIdentity:
    """Identity derived from the address this container's hostname resolves to.

    On ECS with ``awsvpc`` networking the task hostname resolves to the
    task's private IPv4 address, the same value ``DescribeTasks`` reports.
    Resolved once, on first use.
    """
    resolved: list[NodeId] = []

    def identity() -> NodeId:
        if not resolved:
            ip_address = socket.gethostbyname(socket.gethostname())
            resolved.append(format_address(ip_address, node_sname))
        return resolved[0]

    return identity
