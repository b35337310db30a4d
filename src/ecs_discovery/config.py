"""TOML-based configuration for ECS discovery topologies.

Each topology is a ``[topologies.<name>]`` table in ``ecs_discovery.toml``::

    [topologies.backend]
    cluster_arn = "arn:aws:ecs:us-west-2:01234567890:cluster/my-cluster"
    task_arn = "arn:aws:ecs:us-west-2:01234567890:task/f1234567"
    node_sname = "my-app"
    poll_interval_ms = 5000
    aws_region = "us-west-2"
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ecs_discovery.errors import ConfigurationError

__all__ = [
    "CONFIG_FILE_NAME",
    "DEFAULT_AWS_REGION",
    "DEFAULT_POLL_INTERVAL_MS",
    "DiscoveryConfig",
    "discover_config",
    "load_topologies",
]

CONFIG_FILE_NAME = "ecs_discovery.toml"
DEFAULT_POLL_INTERVAL_MS = 5_000
DEFAULT_AWS_REGION = "us-west-2"

_REQUIRED = ("cluster_arn", "task_arn", "node_sname")


@dataclass(frozen=True)
class DiscoveryConfig:
    """Static settings of one discovery topology.

    Parameters
    ----------
    cluster_arn : str
        ARN of the ECS cluster whose tasks are polled.
    task_arn : str
        ARN of the task running this application.
    node_sname : str
        Short name of the nodes to connect to (the part before ``@``).
    poll_interval_ms : int
        Delay between the end of one poll and the start of the next.
    aws_region : str
        Region the ECS requests are sent to.

    Examples
    --------
    >>> DiscoveryConfig(cluster_arn="arn:c", task_arn="arn:t", node_sname="my-app")
    DiscoveryConfig(cluster_arn='arn:c', task_arn='arn:t', node_sname='my-app', poll_interval_ms=5000, aws_region='us-west-2')
    """

    cluster_arn: str
    task_arn: str
    node_sname: str
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    aws_region: str = DEFAULT_AWS_REGION

    @property
    def poll_interval(self) -> float:
        """Poll interval in seconds."""
        return self.poll_interval_ms / 1000.0

    @staticmethod
    def from_mapping(raw: Mapping[str, Any]) -> DiscoveryConfig:
        """Validate *raw* settings and apply defaults.

        Raises
        ------
        ConfigurationError
            If a required field is missing or empty, or the poll interval
            is not a positive integer.
        """
        for name in _REQUIRED:
            value = raw.get(name)
            if value is None or value == "":
                raise ConfigurationError(name)
            if not isinstance(value, str):
                raise ConfigurationError(name, "must be a string")

        poll_interval_ms = raw.get("poll_interval_ms")
        if poll_interval_ms is None:
            poll_interval_ms = DEFAULT_POLL_INTERVAL_MS
        if (
            isinstance(poll_interval_ms, bool)
            or not isinstance(poll_interval_ms, int)
            or poll_interval_ms <= 0
        ):
            raise ConfigurationError("poll_interval_ms", "must be a positive integer")

        aws_region = raw.get("aws_region") or DEFAULT_AWS_REGION

        return DiscoveryConfig(
            cluster_arn=raw["cluster_arn"],
            task_arn=raw["task_arn"],
            node_sname=raw["node_sname"],
            poll_interval_ms=poll_interval_ms,
            aws_region=aws_region,
        )


def discover_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for ``ecs_discovery.toml``."""
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_topologies(path: Path | None = None) -> dict[str, DiscoveryConfig]:
    """Load every ``[topologies.<name>]`` table from a TOML file.

    If *path* is ``None`` the file is auto-discovered; when none is found
    no topologies are returned.

    Raises
    ------
    FileNotFoundError
        If an explicit *path* does not exist.
    ConfigurationError
        If any topology is missing a required field.
    """
    if path is None:
        discovered = discover_config()
        if discovered is None:
            return {}
        path = discovered

    if not path.exists():
        msg = f"Config file not found: {path}"
        raise FileNotFoundError(msg)

    with path.open("rb") as f:
        raw = tomllib.load(f)

    topologies_raw: dict[str, Any] = raw.get("topologies", {})
    return {
        name: DiscoveryConfig.from_mapping(settings)
        for name, settings in topologies_raw.items()
    }
