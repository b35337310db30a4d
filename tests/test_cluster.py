from __future__ import annotations

import pytest
from casty import ActorSystem

from ecs_discovery import (
    ConfigurationError,
    DiscoveryConfig,
    NodeMembership,
    start_topologies,
    static_identity,
)

from tests.utils import FakeEcsClient, RecordingMembership, retry_until, task


def topology(name: str, **overrides: object) -> DiscoveryConfig:
    return DiscoveryConfig.from_mapping(
        {
            "cluster_arn": f"arn:aws:ecs:us-west-2:0123:cluster/{name}",
            "task_arn": f"arn:aws:ecs:us-west-2:0123:task/{name}",
            "node_sname": name,
            "poll_interval_ms": 60_000,
            **overrides,
        }
    )


async def test_starts_one_actor_per_topology() -> None:
    client = FakeEcsClient([["arn:t1"]], [[task("10.0.1.5")]])
    membership = RecordingMembership()

    async with ActorSystem() as system:
        refs = await start_topologies(
            system,
            {"backend": topology("backend"), "frontend": topology("frontend")},
            membership=membership,
            identity=static_identity("backend@10.0.1.99"),
            client=client,
        )

        assert sorted(refs) == ["backend", "frontend"]
        assert system.lookup("ecs-backend") is refs["backend"]
        assert system.lookup("ecs-frontend") is refs["frontend"]

    assert membership.calls == [
        ("backend", frozenset({"backend@10.0.1.5"})),
        ("frontend", frozenset({"frontend@10.0.1.5"})),
    ]
    assert [cluster for cluster, _ in client.list_calls] == [
        "arn:aws:ecs:us-west-2:0123:cluster/backend",
        "arn:aws:ecs:us-west-2:0123:cluster/frontend",
    ]


async def test_connects_through_node_membership() -> None:
    connected: set[str] = set()

    async def connect(node: str) -> bool:
        connected.add(node)
        return True

    client = FakeEcsClient([["arn:t1", "arn:t2"]], [[task("10.0.1.5"), task("10.0.1.6")]])

    async with ActorSystem() as system:
        await start_topologies(
            system,
            {"backend": topology("backend")},
            membership=NodeMembership(connect, lambda: sorted(connected)),
            identity=static_identity("backend@10.0.1.6"),
            client=client,
        )

    assert connected == {"backend@10.0.1.5"}


async def test_invalid_topology_aborts_startup() -> None:
    async with ActorSystem() as system:
        with pytest.raises(ConfigurationError):
            await start_topologies(
                system,
                {"broken": {"cluster_arn": "arn:c"}},  # type: ignore[dict-item]
                membership=RecordingMembership(),
                identity=static_identity("x@1"),
                client=FakeEcsClient(),
            )
        assert system.lookup("ecs-broken") is None


async def test_invalid_topology_spawns_nothing() -> None:
    client = FakeEcsClient([["arn:t1"]], [[task("10.0.1.5")]])

    async with ActorSystem() as system:
        with pytest.raises(ConfigurationError):
            await start_topologies(
                system,
                {
                    "backend": topology("backend"),
                    "broken": {"cluster_arn": "arn:c"},  # type: ignore[dict-item]
                },
                membership=RecordingMembership(),
                identity=static_identity("x@1"),
                client=client,
            )
        assert system.lookup("ecs-backend") is None

    assert client.list_calls == []


async def test_topologies_poll_independently() -> None:
    client = FakeEcsClient([["arn:t1"]], [[task("10.0.1.5")]])
    membership = RecordingMembership()

    def polls(name: str) -> int:
        return sum(1 for topology_name, _ in membership.calls if topology_name == name)

    async with ActorSystem() as system:
        await start_topologies(
            system,
            {
                "backend": topology("backend", poll_interval_ms=30),
                "frontend": topology("frontend", poll_interval_ms=30),
            },
            membership=membership,
            identity=static_identity("backend@10.0.1.99"),
            client=client,
        )
        await retry_until(lambda: polls("backend") >= 3 and polls("frontend") >= 3)
