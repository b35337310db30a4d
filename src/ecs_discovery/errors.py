"""Exception hierarchy for ECS discovery."""

from __future__ import annotations


class EcsDiscoveryError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(EcsDiscoveryError):
    """A required discovery setting is missing or invalid.

    Raised while a discovery actor initializes. Not recoverable: the actor
    never reaches its polling state.
    """

    def __init__(self, field: str, reason: str = "is required") -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"config field '{field}' {reason}")


class OrchestrationQueryError(EcsDiscoveryError):
    """An ECS control-plane call failed.

    Covers network and authentication failures, throttling, timeouts and
    malformed response bodies. Aborts the current poll cycle only.
    """

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation} failed: {detail}")
