from .assessment import (
    AssessmentService,
    CategoryNotFoundError,
    SessionAccessError,
    SessionNotFoundError,
)

__all__ = [
    "AssessmentService",
    "CategoryNotFoundError",
    "SessionAccessError",
    "SessionNotFoundError",
]
