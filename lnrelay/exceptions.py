"""Exception hierarchy for lnrelay.

Every error raised by the package derives from :class:`LNRelayError` and
carries a structured ``context`` dict so it can be logged as keyword data.

Usage:
    from lnrelay.exceptions import ValidationError

    try:
        service.create(amount_sat=0)
    except ValidationError as e:
        logger.error("validation_failed", error=str(e), context=e.context)
"""

from __future__ import annotations

from typing import Any


class LNRelayError(Exception):
    """Base exception for all lnrelay errors.

    Attributes:
        message: Human-readable error message
        context: Additional context for debugging (dict)
        original_error: Original exception if wrapped
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
        base = self.message
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base = f"{base} ({ctx_str})"
        if self.original_error:
            base = f"{base} [caused by: {type(self.original_error).__name__}]"
        return base

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, context={self.context!r})"


# =============================================================================
# Validation & Configuration Errors
# =============================================================================


class ValidationError(LNRelayError):
    """Raised when caller input violates a constraint."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        constraint: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize validation error.

        Args:
            message: Error description
            field: Name of the invalid field
            value: The invalid value (truncated in context)
            constraint: Validation constraint that was violated
            **kwargs: Additional context
        """
        context = kwargs.get("context", {})
        if field:
            context["field"] = field
        if value is not None:
            context["value"] = str(value)[:100]
        if constraint:
            context["constraint"] = constraint
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class ConfigurationError(LNRelayError):
    """Raised when settings are missing or invalid at startup."""

    def __init__(
        self,
        message: str,
        *,
        setting: str | None = None,
        expected: str | None = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.get("context", {})
        if setting:
            context["setting"] = setting
        if expected:
            context["expected"] = expected
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# =============================================================================
# LND Integration Errors
# =============================================================================


class LNDClientError(LNRelayError):
    """Base exception for LND client errors."""


class LNDConnectionError(LNDClientError):
    """Raised when the LND node cannot be reached or rejects the request."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.get("context", {})
        if status_code:
            context["status_code"] = status_code
        if url:
            context["url"] = url[:100]
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class LNDStreamError(LNDClientError):
    """Raised when the node reports an error inside an open invoice stream."""


class LNDInvoiceError(LNDClientError):
    """Raised when invoice creation fails."""


__all__ = [
    "LNRelayError",
    "ValidationError",
    "ConfigurationError",
    "LNDClientError",
    "LNDConnectionError",
    "LNDStreamError",
    "LNDInvoiceError",
]
