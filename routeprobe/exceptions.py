"""Custom exceptions for routeprobe.

All routeprobe-specific exceptions inherit from RouteProbeError so the CLI can
handle them in one place. Each exception keeps the original cause for debugging.
"""

from __future__ import annotations

from typing import Any


class RouteProbeError(Exception):
    """Base exception for all routeprobe errors.

    Attributes:
        message: Human-readable error description
        context: Optional dictionary with additional debugging context
        original_error: Original exception that caused this error (if any)
    """

    def __init__(
        self,
        message: str,
        *,
        context: dict[str, Any] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_error = original_error

    def __str__(self) -> str:
        """Return formatted error message with context if available."""
        base = self.message
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            base = f"{base} [{ctx_str}]"
        if self.original_error:
            base = f"{base} (caused by: {type(self.original_error).__name__}: {self.original_error})"
        return base

    def with_context(self, **kwargs: Any) -> "RouteProbeError":
        """Add context to this error and return self for chaining."""
        self.context.update(kwargs)
        return self


class CollectionError(RouteProbeError):
    """Raised when the input file (route list or Postman collection) is unusable.

    Common causes:
    - Input file not found or unreadable
    - Invalid JSON/YAML syntax
    - Missing or invalid top-level "item" array
    - Request URL in a shape that cannot be resolved
    """


class ConfigError(RouteProbeError):
    """Raised when the run configuration is invalid or cannot be loaded.

    Common causes:
    - Config file not found
    - Invalid YAML syntax
    - Invalid field values (e.g., timeout_seconds <= 0)
    """
