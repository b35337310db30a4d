"""Membership reconciliation.

Discovery hands the full desired node set to a ``Membership`` once per
poll; the membership decides what to do about it. ``NodeMembership``
connects to every desired node not already connected and leaves nodes
that vanished from discovery alone.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Protocol

from ecs_discovery.address import NodeId

type ConnectFn = Callable[[NodeId], Awaitable[bool | None]]
type ListNodesFn = Callable[[], Iterable[NodeId]]


@dataclass(frozen=True)
class ConnectResult:
    """Outcome of one reconciliation.

    ``ignored`` holds nodes the connect function declined because they
    are not part of the network.
    """

    connected: frozenset[NodeId] = frozenset()
    failed: frozenset[NodeId] = frozenset()
    ignored: frozenset[NodeId] = frozenset()

    @property
    def ok(self) -> bool:
        return not self.failed


class Membership(Protocol):
    async def connect_nodes(
        self, topology: str, nodes: frozenset[NodeId]
    ) -> ConnectResult: ...


class NodeMembership:
    """Connect-only reconciliation over user supplied callables.

    Parameters
    ----------
    connect : ConnectFn
        Connects to one node. Returns ``True`` on success, ``False`` on
        failure, ``None`` when the node is not part of the network.
    list_nodes : ListNodesFn
        Nodes this process is currently connected to.
    """

    def __init__(
        self,
        connect: ConnectFn,
        list_nodes: ListNodesFn,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._connect = connect
        self._list_nodes = list_nodes
        self._logger = logger or logging.getLogger("ecs_discovery.membership")

    async def connect_nodes(
        self, topology: str, nodes: frozenset[NodeId]
    ) -> ConnectResult:
        connected_now = set(self._list_nodes())
        connected: set[NodeId] = set()
        failed: set[NodeId] = set()
        ignored: set[NodeId] = set()

        for node in sorted(nodes - connected_now):
            try:
                result = await self._connect(node)
            except Exception:
                self._logger.exception("[%s] error connecting to %s", topology, node)
                failed.add(node)
                continue

            match result:
                case True:
                    self._logger.info("[%s] connected to %s", topology, node)
                    connected.add(node)
                case None:
                    self._logger.info(
                        "[%s] unable to connect to %s: not part of network", topology, node
                    )
                    ignored.add(node)
                case _:
                    self._logger.warning("[%s] unable to connect to %s", topology, node)
                    failed.add(node)

        return ConnectResult(
            connected=frozenset(connected),
            failed=frozenset(failed),
            ignored=frozenset(ignored),
        )
