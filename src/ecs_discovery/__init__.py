from ecs_discovery.address import (
    LocalIdentity,
    NodeId,
    format_address,
    hostname_identity,
    is_self,
    static_identity,
)
from ecs_discovery.cluster import start_discovery, start_topologies
from ecs_discovery.config import (
    DEFAULT_AWS_REGION,
    DEFAULT_POLL_INTERVAL_MS,
    DiscoveryConfig,
    discover_config,
    load_topologies,
)
from ecs_discovery.ecs import (
    ContainerRecord,
    EcsClient,
    HealthStatus,
    NetworkInterfaceRecord,
    OrchestrationClient,
    TaskRecord,
    filter_tasks,
)
from ecs_discovery.errors import (
    ConfigurationError,
    EcsDiscoveryError,
    OrchestrationQueryError,
)
from ecs_discovery.membership import ConnectResult, Membership, NodeMembership
from ecs_discovery.strategy import (
    GetLastPoll,
    Poll,
    PollResult,
    ecs_strategy,
    run_poll_cycle,
)

__all__ = [
    # Addresses
    "LocalIdentity",
    "NodeId",
    "format_address",
    "hostname_identity",
    "is_self",
    "static_identity",
    # Config
    "DEFAULT_AWS_REGION",
    "DEFAULT_POLL_INTERVAL_MS",
    "DiscoveryConfig",
    "discover_config",
    "load_topologies",
    # ECS
    "ContainerRecord",
    "EcsClient",
    "HealthStatus",
    "NetworkInterfaceRecord",
    "OrchestrationClient",
    "TaskRecord",
    "filter_tasks",
    # Errors
    "ConfigurationError",
    "EcsDiscoveryError",
    "OrchestrationQueryError",
    # Membership
    "ConnectResult",
    "Membership",
    "NodeMembership",
    # Strategy
    "GetLastPoll",
    "Poll",
    "PollResult",
    "ecs_strategy",
    "run_poll_cycle",
    "start_discovery",
    "start_topologies",
]
