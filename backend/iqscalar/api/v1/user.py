"""
User history, statistics, achievements and data deletion endpoints.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from iqscalar.api.deps import get_assessment_service, get_user_id
from iqscalar.core.config import settings
from iqscalar.schemas.user import (
    AchievementResponse,
    AchievementsResponse,
    ClearDataResponse,
    HistoryEntryResponse,
    HistoryResponse,
    UserStatsResponse,
)
from iqscalar.services import AssessmentService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/history", response_model=HistoryResponse)
def get_history(
    limit: Optional[int] = Query(
        default=None,
        ge=1,
        le=settings.HISTORY_MAX_ENTRIES,
        description="Return at most this many of the newest entries",
    ),
    user_id: str = Depends(get_user_id),
    service: AssessmentService = Depends(get_assessment_service),
):
    """The caller's test and practice history, newest first."""
    entries = service.user_history(user_id, limit=limit)
    return HistoryResponse(
        entries=[HistoryEntryResponse(**entry.to_dict()) for entry in entries],
        total_count=len(entries),
    )


@router.get("/stats", response_model=UserStatsResponse)
def get_user_stats(
    user_id: str = Depends(get_user_id),
    service: AssessmentService = Depends(get_assessment_service),
):
    """Aggregate statistics over the caller's full tests."""
    return UserStatsResponse(**service.user_stats(user_id))


@router.get("/achievements", response_model=AchievementsResponse)
def get_achievements(
    user_id: str = Depends(get_user_id),
    service: AssessmentService = Depends(get_assessment_service),
):
    """The caller's achievements and their progress."""
    achievements = service.user_achievements(user_id)
    return AchievementsResponse(
        achievements=[AchievementResponse(**a.to_dict()) for a in achievements],
        earned_count=sum(1 for a in achievements if a.is_earned),
    )


@router.delete("/data", response_model=ClearDataResponse)
def delete_user_data(
    user_id: str = Depends(get_user_id),
    service: AssessmentService = Depends(get_assessment_service),
):
    """Delete the caller's history, achievements, exposure and daily quiz data."""
    service.clear_user_data(user_id)
    logger.info("User data deleted", extra={"user_identifier": user_id})
    return ClearDataResponse(message="All user data has been deleted.")
