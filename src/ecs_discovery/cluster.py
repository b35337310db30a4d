"""Start one discovery actor per configured topology."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TYPE_CHECKING

from ecs_discovery.config import DiscoveryConfig
from ecs_discovery.strategy.ecs import EcsStrategyMsg, GetLastPoll, ecs_strategy

if TYPE_CHECKING:
    from casty import ActorRef, ActorSystem

    from ecs_discovery.address import LocalIdentity
    from ecs_discovery.ecs.client import OrchestrationClient
    from ecs_discovery.membership import Membership

logger = logging.getLogger("ecs_discovery.cluster")

DEFAULT_STARTUP_TIMEOUT = 60.0


def actor_name(topology: str) -> str:
    return f"ecs-{topology}"


async def start_discovery(
    system: ActorSystem,
    topology: str,
    config: DiscoveryConfig | Mapping[str, Any],
    *,
    membership: Membership,
    identity: LocalIdentity,
    client: OrchestrationClient | None = None,
    timeout: float = DEFAULT_STARTUP_TIMEOUT,
) -> ActorRef[EcsStrategyMsg]:
    """Spawn the discovery actor for *topology* and wait for its first poll.

    Raises ``ConfigurationError`` before spawning when *config* is
    invalid, and ``TimeoutError`` when the first poll takes longer than
    *timeout* seconds. A first poll that fails against ECS still counts
    as started.
    """
    behavior = ecs_strategy(
        topology, config, membership=membership, identity=identity, client=client
    )
    ref = system.spawn(behavior, actor_name(topology))
    await system.ask(ref, lambda r: GetLastPoll(reply_to=r), timeout=timeout)
    return ref


async def start_topologies(
    system: ActorSystem,
    topologies: Mapping[str, DiscoveryConfig | Mapping[str, Any]],
    *,
    membership: Membership,
    identity: LocalIdentity,
    client: OrchestrationClient | None = None,
    timeout: float = DEFAULT_STARTUP_TIMEOUT,
) -> dict[str, ActorRef[EcsStrategyMsg]]:
    """Start a discovery actor for every topology, in order.

    Every config is validated before the first actor is spawned. Each
    actor has completed its first poll when this returns. The actors
    share *membership*, *identity* and *client* but no state.
    """
    resolved = {
        topology: config
        if isinstance(config, DiscoveryConfig)
        else DiscoveryConfig.from_mapping(config)
        for topology, config in topologies.items()
    }

    refs: dict[str, ActorRef[EcsStrategyMsg]] = {}
    for topology, config in resolved.items():
        refs[topology] = await start_discovery(
            system,
            topology,
            config,
            membership=membership,
            identity=identity,
            client=client,
            timeout=timeout,
        )
    logger.info("Started %d topologies: %s", len(refs), ", ".join(refs))
    return refs
