"""Test utilities: fakes for the ECS client and the membership."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence

from ecs_discovery import (
    ConnectResult,
    ContainerRecord,
    HealthStatus,
    NetworkInterfaceRecord,
    NodeId,
    OrchestrationQueryError,
    TaskRecord,
)


async def retry_until(
    condition: Callable[[], bool | Awaitable[bool]],
    *,
    timeout: float = 5.0,
    interval: float = 0.01,
    message: str = "Condition not met within timeout",
) -> None:
    """Wait until *condition* holds, or raise ``TimeoutError``."""
    start = time.monotonic()
    while time.monotonic() - start < timeout:
        result = condition()
        if asyncio.iscoroutine(result):
            result = await result
        if result:
            return
        await asyncio.sleep(interval)
    raise TimeoutError(message)


def task(
    *addresses: str | None,
    health: HealthStatus = HealthStatus.HEALTHY,
    arn: str = "arn:aws:ecs:us-west-2:0123:task/t",
) -> TaskRecord:
    """A task with one container holding one interface per address."""
    return TaskRecord(
        task_arn=arn,
        health_status=health,
        containers=(
            ContainerRecord(
                network_interfaces=tuple(
                    NetworkInterfaceRecord(private_ipv4_address=a) for a in addresses
                )
            ),
        ),
    )


class FakeEcsClient:
    """In-memory OrchestrationClient.

    ``list_results`` / ``describe_results`` are consumed one per call;
    once a single entry is left it is reused. An exception instance in
    either list is raised instead of returned.
    """

    def __init__(
        self,
        list_results: Sequence[list[str] | Exception] = ([],),
        describe_results: Sequence[list[TaskRecord] | Exception] = ([],),
        *,
        delay: float = 0.0,
    ) -> None:
        self._list_results = list(list_results)
        self._describe_results = list(describe_results)
        self._delay = delay
        self.list_calls: list[tuple[str, str]] = []
        self.describe_calls: list[tuple[str, tuple[str, ...], str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @staticmethod
    def _next[T](results: list[T | Exception]) -> T:
        result = results.pop(0) if len(results) > 1 else results[0]
        if isinstance(result, Exception):
            raise result
        return result

    async def _enter(self) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self._delay:
                await asyncio.sleep(self._delay)
        finally:
            self.in_flight -= 1

    async def list_tasks(self, cluster_arn: str, region: str) -> list[str]:
        self.list_calls.append((cluster_arn, region))
        await self._enter()
        return list(self._next(self._list_results))

    async def describe_tasks(
        self, cluster_arn: str, task_arns: Sequence[str], region: str
    ) -> list[TaskRecord]:
        self.describe_calls.append((cluster_arn, tuple(task_arns), region))
        await self._enter()
        return list(self._next(self._describe_results))


def query_error(operation: str = "describe_tasks") -> OrchestrationQueryError:
    return OrchestrationQueryError(operation, "ThrottlingException: Rate exceeded")


class RecordingMembership:
    """Membership that records every node set it is handed."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, frozenset[NodeId]]] = []

    async def connect_nodes(
        self, topology: str, nodes: frozenset[NodeId]
    ) -> ConnectResult:
        self.calls.append((topology, nodes))
        return ConnectResult(connected=nodes)
