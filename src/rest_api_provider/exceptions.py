"""Exception hierarchy for rest_api_provider.

All exceptions inherit from :class:`RestApiProviderError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`rest_api_provider.exit_codes`. Library callers catch the specific
subclasses; the CLI entry point catches the base class and exits with the
matching code.

Subclass hierarchy::

    RestApiProviderError   (exit 1)
    +-- UnsupportedTypeError (exit 3, also a TypeError)
    +-- ApiError             (exit 5)
    +-- ConfigError          (exit 1)

Coercion failures and validation failures are deliberately absent: the
former are absorbed by the field setters, the latter are reported through
``Resource.errors``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from rest_api_provider.exit_codes import (
    EXIT_API_ERROR,
    EXIT_DECLARATION_ERROR,
    EXIT_GENERIC_FAILURE,
)

if TYPE_CHECKING:
    import httpx

    from rest_api_provider.client import ApiResponse


class RestApiProviderError(Exception):
    """Base exception for all rest_api_provider errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class UnsupportedTypeError(RestApiProviderError, TypeError):
    """Raised when a field or relation is declared with an unsupported type."""

    exit_code = EXIT_DECLARATION_ERROR


class ApiError(RestApiProviderError):
    """Raised for any response outside ``[100, 400)`` or a transport failure.

    The originating request is always attached so callers can inspect what
    was sent.  ``response`` is ``None`` when the transport failed before a
    response was received.

    Args:
        message: Human-readable error description.
        request: The :class:`httpx.Request` that was sent (or built).
        response: The wrapped response, if one was obtained.
    """

    exit_code = EXIT_API_ERROR

    def __init__(
        self,
        message: str,
        request: Optional[httpx.Request] = None,
        response: Optional[ApiResponse] = None,
    ) -> None:
        super().__init__(message)
        self.request = request
        self.response = response

    @property
    def status(self) -> Optional[int]:
        """Status code of the failed response, or ``None`` for transport errors."""
        return self.response.status if self.response is not None else None

    @property
    def body(self) -> Any:
        """Decoded body of the failed response, if any."""
        return self.response.body if self.response is not None else None


class ConfigError(RestApiProviderError):
    """Raised for unreadable or invalid configuration files and values."""

    exit_code = EXIT_GENERIC_FAILURE
