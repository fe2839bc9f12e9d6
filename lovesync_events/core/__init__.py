"""Core modules for the aggregation pipeline."""

from lovesync_events.core.event_model import (
    CandidateEvent,
    Event,
    Provenance,
    SourceKind,
)
from lovesync_events.core.exceptions import (
    ConfigurationError,
    EventHubError,
    FetchError,
    GenerationError,
    ParseError,
    StorageError,
)
from lovesync_events.core.retry import RetryConfig, with_retry

__all__ = [
    # Event models
    "CandidateEvent",
    "Event",
    "Provenance",
    "SourceKind",
    # Exceptions
    "EventHubError",
    "ConfigurationError",
    "FetchError",
    "ParseError",
    "GenerationError",
    "StorageError",
    # Retry
    "RetryConfig",
    "with_retry",
]
