"""Domain errors raised by the validation, analysis, and chat services.

Every error carries a `user_message` that is safe to show to end users.
Raw transport diagnostics stay in `detail` and only ever reach the logs.
"""

from __future__ import annotations

from typing import Optional, Sequence

from fastapi import HTTPException


INTERNAL_ERROR = "Internal server error"


class HealthAIError(Exception):
    """Base class for errors surfaced to API clients."""

    default_message = "Something went wrong. Please try again."
    status_code = 500

    def __init__(self, user_message: Optional[str] = None, *, detail: Optional[str] = None) -> None:
        self.user_message = user_message or self.default_message
        self.detail = detail
        super().__init__(detail or self.user_message)


class ValidationTransportError(HealthAIError):
    """The validity call itself failed (network, quota, unreadable reply)."""

    default_message = "Unable to validate the input. Please try again."
    status_code = 502


class ValidationRejected(HealthAIError):
    """The input does not belong to the accepted domain."""

    default_message = "The input was not recognized as valid."
    status_code = 422

    def __init__(
        self,
        user_message: Optional[str] = None,
        *,
        accepted_categories: Sequence[str] = (),
        detail: Optional[str] = None,
    ) -> None:
        super().__init__(user_message, detail=detail)
        self.accepted_categories = list(accepted_categories)


class AnalysisTransportError(HealthAIError):
    """The analysis call failed before a reply could be read."""

    default_message = "Failed to analyze the input. Please try again."
    status_code = 502


class AnalysisParseError(HealthAIError):
    """The analysis reply did not match the analyzer's declared schema."""

    default_message = "Failed to analyze the input. Please try again."
    status_code = 502


class StreamTransportError(HealthAIError):
    """The streaming chat call failed mid-flight."""

    default_message = "⚠️ Sorry, I encountered an error. Please try again."
    status_code = 502


class DuplicateInputError(HealthAIError):
    """An item is already present in a collection-based input."""

    default_message = "This item has already been added."
    status_code = 422


class SessionBusyError(HealthAIError):
    """A chat request is already in flight for the session."""

    default_message = "A response is already being generated. Cancel it or wait for it to finish."
    status_code = 409


def http_error(exc: HealthAIError) -> HTTPException:
    """Translate a domain error into an HTTPException with a user-facing detail."""
    detail = {"error": type(exc).__name__, "message": exc.user_message}
    if isinstance(exc, ValidationRejected) and exc.accepted_categories:
        detail["accepted_categories"] = exc.accepted_categories
    return HTTPException(status_code=exc.status_code, detail=detail)
