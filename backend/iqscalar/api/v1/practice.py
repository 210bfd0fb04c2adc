"""
Practice endpoints. Practice questions may repeat and never affect the
full-test exposure record.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from iqscalar.api.deps import get_assessment_service, get_user_id
from iqscalar.api.v1.test import build_start_response, submit_or_raise
from iqscalar.core.config import settings
from iqscalar.core.error_responses import ErrorMessages, raise_not_found
from iqscalar.schemas.questions import PracticeCategoriesResponse
from iqscalar.schemas.test_sessions import (
    StartSessionResponse,
    SubmitAnswersRequest,
    SubmitSessionResponse,
)
from iqscalar.schemas.user import PracticeStatsResponse
from iqscalar.services import AssessmentService, CategoryNotFoundError

router = APIRouter()


@router.get("/categories", response_model=PracticeCategoriesResponse)
def list_practice_categories(
    service: AssessmentService = Depends(get_assessment_service),
):
    """Categories available for practice, with their question counts."""
    counts = service.practice_categories()
    return PracticeCategoriesResponse(
        categories=sorted(counts), questions_per_category=counts
    )


@router.post("/start", response_model=StartSessionResponse)
def start_practice(
    count: int = Query(
        default=settings.PRACTICE_DEFAULT_QUESTIONS,
        ge=1,
        le=settings.MAX_QUESTIONS_PER_REQUEST,
        description="Maximum number of practice questions",
    ),
    category: Optional[str] = Query(
        default=None, description="Restrict practice to one category"
    ),
    user_id: str = Depends(get_user_id),
    service: AssessmentService = Depends(get_assessment_service),
):
    """
    Start a practice attempt of up to ``count`` questions.

    Raises:
        HTTPException: 404 if the category has no practice questions
    """
    try:
        session = service.start_practice(user_id, count, category=category)
    except CategoryNotFoundError as e:
        raise_not_found(ErrorMessages.unknown_category(e.category))

    return build_start_response(session)


@router.post("/submit", response_model=SubmitSessionResponse)
def submit_practice(
    submission: SubmitAnswersRequest,
    user_id: str = Depends(get_user_id),
    service: AssessmentService = Depends(get_assessment_service),
):
    """Submit answers for a practice session and return the scored result."""
    outcome = submit_or_raise(service, submission, user_id)
    return SubmitSessionResponse.from_outcome(outcome)


@router.get("/stats", response_model=PracticeStatsResponse)
def get_practice_stats(
    user_id: str = Depends(get_user_id),
    service: AssessmentService = Depends(get_assessment_service),
):
    """Aggregate statistics over the caller's practice attempts."""
    return PracticeStatsResponse(**service.practice_stats(user_id))
