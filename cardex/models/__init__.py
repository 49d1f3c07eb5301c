from cardex.models.card import Card
from cardex.models.discovery import Recommendation
from cardex.models.failure import (
    ApiResponse,
    ConflictError,
    FailureDetail,
    FailureKind,
    ForbiddenError,
    InvalidArgumentError,
    KnownError,
    NotFoundError,
    OutcomeType,
    UnauthorizedError,
)
from cardex.models.thread import Thread

__all__ = [
    "ApiResponse",
    "Card",
    "ConflictError",
    "FailureDetail",
    "FailureKind",
    "ForbiddenError",
    "InvalidArgumentError",
    "KnownError",
    "NotFoundError",
    "OutcomeType",
    "Recommendation",
    "Thread",
    "UnauthorizedError",
]
