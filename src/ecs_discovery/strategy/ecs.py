"""ECS discovery strategy actor.

Polls the ECS API for the tasks of a cluster and hands every healthy
peer it finds to a ``Membership``. The first poll runs during setup;
``GetLastPoll`` is only answered once setup is over, which is how
``start_discovery`` waits for it. After that each poll re-arms a
one-shot timer when it finishes, so polls never overlap and a slow ECS
call delays the next poll instead of doubling it up.

Usage::

    async with ActorSystem() as system:
        ref = system.spawn(
            ecs_strategy(
                "backend",
                {
                    "cluster_arn": "arn:aws:ecs:us-west-2:01234567890:cluster/my-cluster",
                    "task_arn": "arn:aws:ecs:us-west-2:01234567890:task/f1234567",
                    "node_sname": "my-app",
                },
                membership=NodeMembership(connect, list_nodes),
                identity=hostname_identity("my-app"),
            ),
            "ecs-backend",
        )
        last = await system.ask(ref, lambda r: GetLastPoll(reply_to=r), timeout=30.0)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

from casty import Behaviors, ScheduleOnce

from ecs_discovery.config import DiscoveryConfig
from ecs_discovery.ecs.client import EcsClient, OrchestrationClient
from ecs_discovery.ecs.filter import filter_tasks
from ecs_discovery.ecs.records import TaskRecord
from ecs_discovery.errors import OrchestrationQueryError

if TYPE_CHECKING:
    from casty import ActorContext, ActorRef, Behavior

    from ecs_discovery.address import LocalIdentity, NodeId
    from ecs_discovery.membership import Membership


POLL_TIMER_KEY = "ecs-poll"


@dataclass(frozen=True)
class Poll:
    """Run one poll cycle now."""


@dataclass(frozen=True)
class GetLastPoll:
    """Reply with the result of the latest poll, ``None`` if it failed."""

    reply_to: ActorRef[PollResult | None]


type EcsStrategyMsg = Poll | GetLastPoll


def poll_timer_key(topology: str) -> str:
    return f"{POLL_TIMER_KEY}/{topology}"


@dataclass(frozen=True)
class StrategyState:
    topology: str
    config: DiscoveryConfig
    client: OrchestrationClient
    membership: Membership
    identity: LocalIdentity
    log: logging.Logger


@dataclass(frozen=True)
class PollResult:
    task_arns: tuple[str, ...]
    tasks: tuple[TaskRecord, ...]
    nodes: frozenset[NodeId]


async def run_poll_cycle(state: StrategyState) -> PollResult:
    """List, describe and filter tasks, then reconcile the result.

    Raises ``OrchestrationQueryError`` before touching the membership if
    either ECS call fails.
    """
    config = state.config
    log = state.log
    log.debug(
        "[%s] polling ECS cluster [%s] for task [%s]",
        state.topology,
        config.cluster_arn,
        config.task_arn,
    )

    log.debug("[%s] listing tasks for %s", state.topology, config.cluster_arn)
    task_arns = await state.client.list_tasks(config.cluster_arn, config.aws_region)

    tasks: list[TaskRecord] = []
    if task_arns:
        log.debug("[%s] describing tasks for %s", state.topology, config.cluster_arn)
        tasks = await state.client.describe_tasks(
            config.cluster_arn, task_arns, config.aws_region
        )

    log.debug("[%s] filtering %r", state.topology, tasks)
    nodes = filter_tasks(tasks, config.node_sname, state.identity)
    log.debug("[%s] found nodes: %s", state.topology, sorted(nodes))

    await state.membership.connect_nodes(state.topology, nodes)
    return PollResult(task_arns=tuple(task_arns), tasks=tuple(tasks), nodes=nodes)


def ecs_strategy(
    topology: str,
    config: DiscoveryConfig | Mapping[str, Any],
    *,
    membership: Membership,
    identity: LocalIdentity,
    client: OrchestrationClient | None = None,
    logger: logging.Logger | None = None,
) -> Behavior[EcsStrategyMsg]:
    """Behavior of the discovery actor for one topology.

    A *config* mapping is validated here, before anything is spawned; a
    missing ``cluster_arn``, ``task_arn`` or ``node_sname`` raises
    ``ConfigurationError``.
    """
    resolved = (
        config if isinstance(config, DiscoveryConfig) else DiscoveryConfig.from_mapping(config)
    )
    log = logger or logging.getLogger(f"ecs_discovery.strategy.{topology}")

    async def setup(ctx: ActorContext[EcsStrategyMsg]) -> Behavior[EcsStrategyMsg]:
        state = StrategyState(
            topology=topology,
            config=resolved,
            client=client or EcsClient(),
            membership=membership,
            identity=identity,
            log=log,
        )
        log.info(
            "[%s] starting ecs polling for %s / %s",
            topology,
            resolved.cluster_arn,
            resolved.task_arn,
        )
        return polling(state, await do_poll(ctx, state))

    return Behaviors.setup(setup)


async def do_poll(
    ctx: ActorContext[EcsStrategyMsg], state: StrategyState
) -> PollResult | None:
    """Run one cycle and arm the next one, whatever the cycle raised."""
    try:
        return await run_poll_cycle(state)
    except OrchestrationQueryError as exc:
        state.log.warning("[%s] poll failed, retrying next cycle: %s", state.topology, exc)
    except Exception:
        state.log.exception("[%s] unexpected error during poll", state.topology)
    finally:
        ctx.system.scheduler.tell(
            ScheduleOnce(
                key=poll_timer_key(state.topology),
                target=ctx.self,
                message=Poll(),
                delay=state.config.poll_interval,
            )
        )
    return None


def polling(
    state: StrategyState, last: PollResult | None
) -> Behavior[EcsStrategyMsg]:
    async def receive(
        ctx: ActorContext[EcsStrategyMsg], msg: EcsStrategyMsg
    ) -> Behavior[EcsStrategyMsg]:
        match msg:
            case Poll():
                return polling(state, await do_poll(ctx, state))
            case GetLastPoll(reply_to=reply_to):
                reply_to.tell(last)
                return Behaviors.same()
            case _:
                state.log.debug("[%s] ignoring message %r", state.topology, msg)
                return Behaviors.same()

    return Behaviors.receive(receive)
