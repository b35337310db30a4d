from ecs_discovery.ecs.client import (
    ClientFactory,
    EcsClient,
    OrchestrationClient,
    boto3_client_factory,
)
from ecs_discovery.ecs.filter import filter_tasks
from ecs_discovery.ecs.records import (
    ContainerRecord,
    HealthStatus,
    NetworkInterfaceRecord,
    TaskRecord,
)

__all__ = [
    "ClientFactory",
    "ContainerRecord",
    "EcsClient",
    "HealthStatus",
    "NetworkInterfaceRecord",
    "OrchestrationClient",
    "TaskRecord",
    "boto3_client_factory",
    "filter_tasks",
]
