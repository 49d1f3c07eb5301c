"""
Failure classification for the exchange core.

Every operation in the core fails fast with one of four kinds:

- NotFound: a referenced card, thread or block entry does not exist
- Conflict: a write would break a uniqueness rule (duplicate tag set, double block)
- Forbidden: a business rule disallows the operation
- InvalidArgument: an input value is malformed (out-of-range rating)

The core raises and never catches these. The API layer converts them into
the ApiResponse envelope below, so no failure reaches a caller unclassified.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    FORBIDDEN = "forbidden"
    INVALID_ARGUMENT = "invalid_argument"

    # Raised by the API layer only
    UNAUTHORIZED = "unauthorized"

    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


UNKNOWN_FAILURE_MESSAGE = "Something went wrong and we don't know why. Please retry."


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="Explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )


class ApiResponse(BaseModel, Generic[T]):
    """
    Response envelope for API failures and results.

    Every response is classified into one of the outcome types.
    """

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    data: T | None = Field(
        default=None,
        description="Response data (present on success)",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )

    @classmethod
    def success(cls, data: T) -> "ApiResponse[T]":
        """Create a success response."""
        return cls(outcome=OutcomeType.SUCCESS, data=data)

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
    ) -> "ApiResponse[Any]":
        """Create a known failure response."""
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(kind=kind, message=message, detail=detail),
        )

    @classmethod
    def unknown_failure(cls, detail: str | None = None) -> "ApiResponse[Any]":
        """
        Create an unknown failure response.

        The message is fixed: the system does not know why it failed.
        """
        return cls(
            outcome=OutcomeType.UNKNOWN_FAILURE,
            failure=FailureDetail(
                kind=FailureKind.UNKNOWN,
                message=UNKNOWN_FAILURE_MESSAGE,
                detail=detail,
            ),
        )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    kind: FailureKind = FailureKind.UNKNOWN
    status_code: int = 400

    def __init__(
        self,
        message: str,
        detail: str | None = None,
    ):
        self.message = message
        self.detail = detail
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
        )


class NotFoundError(KnownError):
    """A referenced entity does not exist where existence was required."""

    kind = FailureKind.NOT_FOUND
    status_code = 404


class ConflictError(KnownError):
    """A write would violate a uniqueness invariant."""

    kind = FailureKind.CONFLICT
    status_code = 409


class ForbiddenError(KnownError):
    """An operation is disallowed by a business rule."""

    kind = FailureKind.FORBIDDEN
    status_code = 403


class InvalidArgumentError(KnownError):
    """An input value is malformed."""

    kind = FailureKind.INVALID_ARGUMENT
    status_code = 400


class UnauthorizedError(KnownError):
    """No acting user was supplied by the identity provider."""

    kind = FailureKind.UNAUTHORIZED
    status_code = 401
