from .utils.errors import (
    ConflictError,
    InvalidArgument,
    NoPriorRevision,
    NotFoundError,
    OrchestrationError,
    RevisionNotFound,
    RolloutError,
    UnsupportedOperation,
)
from .utils.rollout import RolloutController

__all__ = [
    "ConflictError",
    "InvalidArgument",
    "NoPriorRevision",
    "NotFoundError",
    "OrchestrationError",
    "RevisionNotFound",
    "RolloutController",
    "RolloutError",
    "UnsupportedOperation",
]
