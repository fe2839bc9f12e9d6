"""Request-scoped dependencies."""

from lovesync_events.core.orchestrator import AggregationOrchestrator


def get_orchestrator() -> AggregationOrchestrator:
    """A fresh orchestrator per request; it holds no state across invocations."""
    return AggregationOrchestrator()
