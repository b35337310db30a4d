"""ECS control-plane client.

Wraps the two calls discovery needs, ``ListTasks`` and ``DescribeTasks``,
behind coroutines. boto3 is blocking, so every request runs in the event
loop's default executor and is bounded by a timeout. No retries happen
here: a failed call raises ``OrchestrationQueryError`` and the next poll
is the retry.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ecs_discovery.ecs.records import TaskRecord
from ecs_discovery.errors import OrchestrationQueryError

logger = logging.getLogger("ecs_discovery.ecs.client")

DESCRIBE_TASKS_BATCH_SIZE = 100
DEFAULT_TIMEOUT = 10.0

type ClientFactory = Callable[[str], Any]


class OrchestrationClient(Protocol):
    async def list_tasks(self, cluster_arn: str, region: str) -> list[str]: ...

    async def describe_tasks(
        self,
        cluster_arn: str,
        task_arns: Sequence[str],
        region: str,
    ) -> list[TaskRecord]: ...


def boto3_client_factory(timeout: float = DEFAULT_TIMEOUT) -> ClientFactory:
    """Build boto3 ECS clients with SDK-level retries disabled."""
    config = Config(
        connect_timeout=timeout,
        read_timeout=timeout,
        retries={"total_max_attempts": 1, "mode": "standard"},
    )

    def factory(region: str) -> Any:
        return boto3.client("ecs", region_name=region, config=config)

    return factory


class EcsClient:
    """``OrchestrationClient`` backed by boto3.

    Parameters
    ----------
    client_factory : ClientFactory | None
        Builds the boto3 ECS client for a region. One client is created
        per region, on first use.
    timeout : float
        Upper bound in seconds for a single request.
    """

    def __init__(
        self,
        *,
        client_factory: ClientFactory | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._client_factory = client_factory or boto3_client_factory(timeout)
        self._timeout = timeout
        self._clients: dict[str, Any] = {}

    def _client(self, region: str) -> Any:
        client = self._clients.get(region)
        if client is None:
            client = self._client_factory(region)
            self._clients[region] = client
        return client

    async def _request(self, operation: str, region: str, **params: Any) -> dict[str, Any]:
        loop = asyncio.get_running_loop()
        try:
            method = getattr(self._client(region), operation)
            response = await asyncio.wait_for(
                loop.run_in_executor(None, functools.partial(method, **params)),
                timeout=self._timeout,
            )
        except ClientError as exc:
            error = exc.response.get("Error", {})
            detail = f"{error.get('Code', 'Unknown')}: {error.get('Message', exc)}"
            raise OrchestrationQueryError(operation, detail) from exc
        except BotoCoreError as exc:
            raise OrchestrationQueryError(operation, str(exc)) from exc
        except TimeoutError as exc:
            detail = f"timed out after {self._timeout}s"
            raise OrchestrationQueryError(operation, detail) from exc

        if not isinstance(response, dict):
            raise OrchestrationQueryError(operation, "response body is not an object")
        return response

    async def list_tasks(self, cluster_arn: str, region: str) -> list[str]:
        """ARNs of every task in *cluster_arn*, following pagination."""
        task_arns: list[str] = []
        params: dict[str, Any] = {"cluster": cluster_arn}
        while True:
            response = await self._request("list_tasks", region, **params)
            page = response.get("taskArns")
            if not isinstance(page, list) or not all(isinstance(a, str) for a in page):
                raise OrchestrationQueryError("list_tasks", "missing or invalid 'taskArns'")
            task_arns.extend(page)

            next_token = response.get("nextToken")
            if not next_token:
                return task_arns
            params = {"cluster": cluster_arn, "nextToken": next_token}

    async def describe_tasks(
        self,
        cluster_arn: str,
        task_arns: Sequence[str],
        region: str,
    ) -> list[TaskRecord]:
        """Describe *task_arns*; tasks that no longer exist are left out."""
        records: list[TaskRecord] = []
        for start in range(0, len(task_arns), DESCRIBE_TASKS_BATCH_SIZE):
            batch = list(task_arns[start : start + DESCRIBE_TASKS_BATCH_SIZE])
            response = await self._request(
                "describe_tasks", region, cluster=cluster_arn, tasks=batch
            )
            tasks = response.get("tasks")
            if not isinstance(tasks, list):
                raise OrchestrationQueryError("describe_tasks", "missing or invalid 'tasks'")

            failures = response.get("failures") or []
            if not isinstance(failures, list) or not all(
                isinstance(f, Mapping) for f in failures
            ):
                raise OrchestrationQueryError("describe_tasks", "invalid 'failures'")

            for failure in failures:
                logger.debug(
                    "describe_tasks skipped %s: %s",
                    failure.get("arn"),
                    failure.get("reason"),
                )

            records.extend(
                TaskRecord.from_response(task) for task in tasks if isinstance(task, dict)
            )
        return records
