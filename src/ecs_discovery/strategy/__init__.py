from ecs_discovery.strategy.ecs import (
    POLL_TIMER_KEY,
    EcsStrategyMsg,
    GetLastPoll,
    Poll,
    PollResult,
    StrategyState,
    ecs_strategy,
    poll_timer_key,
    run_poll_cycle,
)

__all__ = [
    "POLL_TIMER_KEY",
    "EcsStrategyMsg",
    "GetLastPoll",
    "Poll",
    "PollResult",
    "StrategyState",
    "ecs_strategy",
    "poll_timer_key",
    "run_poll_cycle",
]
