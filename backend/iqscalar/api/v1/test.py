"""
Full test endpoints: start, submit, progress and bank statistics.
"""
import logging

from fastapi import APIRouter, Depends, Query

from iqscalar.api.deps import get_assessment_service, get_user_id
from iqscalar.core.config import settings
from iqscalar.core.error_responses import (
    ErrorMessages,
    raise_bad_request,
    raise_forbidden,
    raise_not_found,
)
from iqscalar.core.test_composition import InsufficientQuestionsError
from iqscalar.schemas.questions import BankStatisticsResponse, QuestionResponse
from iqscalar.schemas.test_sessions import (
    ProgressResponse,
    StartSessionResponse,
    SubmitAnswersRequest,
    SubmitSessionResponse,
)
from iqscalar.services import (
    AssessmentService,
    SessionAccessError,
    SessionNotFoundError,
)
from iqscalar.services.assessment import StartedSession, SubmissionOutcome

router = APIRouter()
logger = logging.getLogger(__name__)


def build_start_response(session: StartedSession) -> StartSessionResponse:
    return StartSessionResponse(
        session_id=session.session_id,
        mode=session.mode,
        started_at=session.started_at,
        category=session.category,
        questions=[QuestionResponse.from_allocated(q) for q in session.questions],
        total_questions=len(session.questions),
    )


def submit_or_raise(
    service: AssessmentService, submission: SubmitAnswersRequest, user_id: str
) -> SubmissionOutcome:
    """Submit a session, translating service errors into HTTP errors."""
    try:
        return service.submit(submission.session_id, user_id, submission.answers)
    except SessionNotFoundError:
        raise_not_found(ErrorMessages.SESSION_NOT_FOUND)
    except SessionAccessError:
        raise_forbidden(ErrorMessages.SESSION_ACCESS_DENIED)
    except ValueError:
        raise_bad_request(ErrorMessages.TOO_MANY_ANSWERS)


@router.post("/start", response_model=StartSessionResponse)
def start_test(
    count: int = Query(
        default=settings.TEST_TOTAL_QUESTIONS,
        ge=1,
        le=settings.MAX_QUESTIONS_PER_REQUEST,
        description="Number of questions for this test",
    ),
    user_id: str = Depends(get_user_id),
    service: AssessmentService = Depends(get_assessment_service),
):
    """
    Start a new full test for the caller.

    Questions the caller has already seen are excluded until the bank is
    exhausted, at which point their exposure record resets.

    Raises:
        HTTPException: 400 if more questions are requested than the bank holds
    """
    try:
        session = service.start_test(user_id, count)
    except InsufficientQuestionsError as e:
        logger.warning(
            f"Rejected test start: requested {e.requested}, bank holds {e.available}"
        )
        raise_bad_request(ErrorMessages.insufficient_questions(e.requested, e.available))

    return build_start_response(session)


@router.post("/submit", response_model=SubmitSessionResponse)
def submit_test(
    submission: SubmitAnswersRequest,
    user_id: str = Depends(get_user_id),
    service: AssessmentService = Depends(get_assessment_service),
):
    """
    Submit answers for a test session and return the scored result.

    A session can be submitted exactly once.

    Raises:
        HTTPException: 404 unknown/expired/submitted session, 403 not the
            caller's session, 400 more answers than questions
    """
    outcome = submit_or_raise(service, submission, user_id)
    return SubmitSessionResponse.from_outcome(outcome)


@router.get("/progress", response_model=ProgressResponse)
def get_progress(
    user_id: str = Depends(get_user_id),
    service: AssessmentService = Depends(get_assessment_service),
):
    """How far the caller has progressed through the test bank."""
    return ProgressResponse(**service.progress(user_id))


@router.get("/statistics", response_model=BankStatisticsResponse)
def get_bank_statistics(
    service: AssessmentService = Depends(get_assessment_service),
):
    """Summary statistics for the full-test question bank."""
    return BankStatisticsResponse(**service.bank_statistics())
