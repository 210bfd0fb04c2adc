"""
Daily quiz endpoints. Every user gets the same question on a given UTC date.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from iqscalar.api.deps import get_assessment_service, get_user_id
from iqscalar.core.daily_quiz import DailyQuizAlreadyAnsweredError
from iqscalar.core.datetime_utils import parse_date_string, today_string
from iqscalar.core.error_responses import (
    ErrorMessages,
    raise_bad_request,
    raise_conflict,
    raise_not_found,
)
from iqscalar.schemas.daily_quiz import (
    DailyAnswerRecordResponse,
    DailyAnswerRequest,
    DailyAnswerResultResponse,
    DailyQuestionResponse,
    DailyStatsResponse,
)
from iqscalar.services import AssessmentService

router = APIRouter()

DATE_QUERY_DESCRIPTION = "Calendar date (YYYY-MM-DD); defaults to today (UTC)"


def resolve_date(date: Optional[str]) -> str:
    """Validate an optional ``YYYY-MM-DD`` query value, defaulting to today."""
    if date is None:
        return today_string()
    try:
        return parse_date_string(date).isoformat()
    except ValueError:
        raise_bad_request(f"Invalid date '{date}'. Use the YYYY-MM-DD format.")


@router.get("/question", response_model=DailyQuestionResponse)
def get_daily_question(
    date: Optional[str] = Query(default=None, description=DATE_QUERY_DESCRIPTION),
    user_id: str = Depends(get_user_id),
    service: AssessmentService = Depends(get_assessment_service),
):
    """The question of the day, without its answer."""
    day = resolve_date(date)
    daily = service.daily_question(day)
    question = daily.question
    return DailyQuestionResponse(
        daily_quiz_id=daily.daily_quiz_id,
        date=daily.date,
        id=question.id,
        category=question.category,
        question_text=question.prompt,
        options=list(question.options),
        has_answered=service.has_answered_daily(user_id, day),
    )


@router.post("/answer", response_model=DailyAnswerResultResponse)
def submit_daily_answer(
    payload: DailyAnswerRequest,
    date: Optional[str] = Query(default=None, description=DATE_QUERY_DESCRIPTION),
    user_id: str = Depends(get_user_id),
    service: AssessmentService = Depends(get_assessment_service),
):
    """
    Answer the daily quiz. Only the first answer for a date counts.

    Raises:
        HTTPException: 409 if the date was already answered
    """
    day = resolve_date(date)
    try:
        result = service.submit_daily_answer(user_id, payload.answer_index, date=day)
    except DailyQuizAlreadyAnsweredError:
        raise_conflict(ErrorMessages.daily_already_answered(day))
    return DailyAnswerResultResponse(**result)


@router.get("/answer", response_model=DailyAnswerRecordResponse)
def get_daily_answer(
    date: Optional[str] = Query(default=None, description=DATE_QUERY_DESCRIPTION),
    user_id: str = Depends(get_user_id),
    service: AssessmentService = Depends(get_assessment_service),
):
    """
    The caller's stored answer for a date.

    Raises:
        HTTPException: 404 if the date has not been answered
    """
    day = resolve_date(date)
    record = service.daily_answer(user_id, day)
    if record is None:
        raise_not_found(ErrorMessages.daily_answer_not_found(day))
    return DailyAnswerRecordResponse(**record)


@router.get("/stats", response_model=DailyStatsResponse)
def get_daily_stats(
    user_id: str = Depends(get_user_id),
    service: AssessmentService = Depends(get_assessment_service),
):
    """Totals, accuracy and streaks for the caller's daily quiz answers."""
    return DailyStatsResponse(**service.daily_stats(user_id))
