"""Unified exception hierarchy for the event aggregation pipeline.

Exception categories:
- Configuration errors (missing API keys, unknown adapters)
- Fetch errors (HTTP, timeout, rate limiting)
- Parse errors (invalid payloads, missing fields, rejected LLM batches)
- Generation errors (LLM failures)
- Storage errors (Supabase failures)
"""


class EventHubError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, source: str | None = None, details: dict | None = None):
        self.source = source
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        msg = super().__str__()
        if self.source:
            msg = f"[{self.source}] {msg}"
        return msg


# ============================================================
# CONFIGURATION ERRORS
# ============================================================


class ConfigurationError(EventHubError):
    """Base class for configuration-related errors."""
    pass


class MissingApiKeyError(ConfigurationError):
    """Raised when a provider's API key is not set."""

    def __init__(self, source: str, env_var: str):
        self.env_var = env_var
        super().__init__(f"{env_var} not configured", source=source, details={"env_var": env_var})


class AdapterNotFoundError(ConfigurationError):
    """Raised when no adapter is registered for a source."""

    def __init__(self, slug: str, available: list[str] | None = None):
        self.slug = slug
        self.available = available or []
        msg = "No adapter registered for source"
        if available:
            msg += f". Available: {', '.join(available)}"
        super().__init__(msg, source=slug)


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values or request parameters are invalid."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        details = {"field": field} if field else {}
        super().__init__(message, details=details)


# ============================================================
# FETCH ERRORS
# ============================================================


class FetchError(EventHubError):
    """Base class for data fetching errors."""
    pass


class HTTPError(FetchError):
    """Raised for HTTP-related failures."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
        source: str | None = None,
    ):
        self.status_code = status_code
        self.url = url
        details = {}
        if status_code:
            details["status_code"] = status_code
        if url:
            details["url"] = url
        super().__init__(message, source=source, details=details)


class TimeoutError(FetchError):
    """Raised when a provider call exceeds its timeout."""

    def __init__(self, timeout: float, source: str | None = None, url: str | None = None):
        self.url = url
        self.timeout = timeout
        super().__init__(
            f"Timed out after {timeout}s",
            source=source,
            details={"url": url, "timeout": timeout},
        )


class RateLimitError(FetchError):
    """Raised when rate limited by the provider."""

    def __init__(self, source: str, retry_after: int | None = None):
        self.retry_after = retry_after
        msg = "Rate limited by provider"
        if retry_after:
            msg += f", retry after {retry_after}s"
        super().__init__(msg, source=source, details={"retry_after": retry_after})


class FirecrawlError(FetchError):
    """Raised when Firecrawl cannot render a page."""

    def __init__(self, message: str, url: str | None = None, source: str | None = None):
        self.url = url
        super().__init__(message, source=source, details={"url": url})


# ============================================================
# PARSE ERRORS
# ============================================================


class ParseError(EventHubError):
    """Base class for data parsing errors."""
    pass


class MissingFieldError(ParseError):
    """Raised when a required field is missing."""

    def __init__(self, field: str, event_id: str | None = None, source: str | None = None):
        self.field = field
        self.event_id = event_id
        msg = f"Missing required field: {field}"
        if event_id:
            msg += f" (event: {event_id})"
        super().__init__(msg, source=source, details={"field": field, "event_id": event_id})


class JSONParseError(ParseError):
    """Raised when JSON parsing fails."""

    def __init__(self, message: str, raw_data: str | None = None, source: str | None = None):
        self.raw_data = raw_data[:200] if raw_data else None
        super().__init__(message, source=source, details={"raw_data_preview": self.raw_data})


class InvalidBatchError(ParseError):
    """Raised when a generated batch does not have the expected shape."""

    def __init__(self, message: str, source: str | None = None):
        super().__init__(message, source=source)


# ============================================================
# GENERATION ERRORS
# ============================================================


class GenerationError(EventHubError):
    """Base class for LLM generation errors."""
    pass


class LLMError(GenerationError):
    """Raised for LLM API failures."""

    def __init__(self, message: str, model: str | None = None, source: str | None = None):
        self.model = model
        super().__init__(message, source=source, details={"model": model})


# ============================================================
# STORAGE ERRORS
# ============================================================


class StorageError(EventHubError):
    """Base class for storage-related errors."""
    pass


class SupabaseError(StorageError):
    """Raised for Supabase-specific errors."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        table: str | None = None,
        source: str | None = None,
    ):
        self.operation = operation
        self.table = table
        super().__init__(
            message,
            source=source,
            details={"operation": operation, "table": table},
        )
