"""
Shared request dependencies.
"""
from typing import Optional

from fastapi import Header, Request

from iqscalar.services import AssessmentService

ANONYMOUS_USER = "anonymous"


def get_user_id(
    x_user_id: Optional[str] = Header(
        default=None,
        alias="X-User-ID",
        description="Opaque user identifier; requests without one share the anonymous profile",
    ),
) -> str:
    """Resolve the caller's user identifier from the X-User-ID header."""
    if x_user_id is None or not x_user_id.strip():
        return ANONYMOUS_USER
    return x_user_id.strip()


def get_assessment_service(request: Request) -> AssessmentService:
    """The process-wide AssessmentService created during application startup."""
    return request.app.state.assessment_service
