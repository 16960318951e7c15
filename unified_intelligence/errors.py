"""Error types raised across the unified intelligence package."""

from __future__ import annotations


class UnifiedIntelligenceError(Exception):
    """Base class for every error this package raises."""


class StorageError(UnifiedIntelligenceError):
    """A storage backend or its connection pool failed."""

    def __init__(self, detail: str, *, pool: bool = False) -> None:
        self.detail = detail
        self.pool = pool
        prefix = "Connection pool error" if pool else "Redis error"
        super().__init__(f"{prefix}: {detail}")


class PoolCreationError(UnifiedIntelligenceError):
    """The connection pool could not be created."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Connection pool creation error: {detail}")


class SerializationError(UnifiedIntelligenceError):
    """Data could not be encoded or decoded."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Serialization error: {detail}")


class ValidationError(UnifiedIntelligenceError):
    """An input field failed validation."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Validation error: {field} - {reason}")


class InvalidActionError(UnifiedIntelligenceError):
    """An unknown action was requested."""

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"Invalid action: {action}")


class ChainOperationError(UnifiedIntelligenceError):
    """An operation on a thought chain failed."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Chain operation failed: {detail}")


class RateLimitError(UnifiedIntelligenceError):
    """Too many requests were made within the rate-limit window."""

    def __init__(self) -> None:
        super().__init__("Rate limit exceeded")


class UnauthorizedError(UnifiedIntelligenceError):
    """The caller is not allowed to perform the operation."""

    def __init__(self) -> None:
        super().__init__("Unauthorized access")


class InternalError(UnifiedIntelligenceError):
    """An unexpected internal failure."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Internal error: {detail}")


class NotFoundError(UnifiedIntelligenceError):
    """A requested item does not exist."""

    def __init__(self, what: str) -> None:
        self.what = what
        super().__init__(f"Not found: {what}")


class DuplicateThoughtError(UnifiedIntelligenceError):
    """The same thought was already stored for an instance."""

    def __init__(self, instance: str, preview: str) -> None:
        self.instance = instance
        self.preview = preview
        super().__init__(
            f"Duplicate thought detected for instance {instance}: {preview}"
        )