"""
Pydantic schemas for user history, statistics and achievements.
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class HistoryEntryResponse(BaseModel):
    """Schema for one entry in a user's history."""

    id: str = Field(..., description="Result ID")
    date: str = Field(..., description="ISO-8601 UTC timestamp")
    type: str = Field(..., description="'Full IQ Test' or 'Practice - <category>'")
    score: int = Field(
        ..., description="Ability estimate for tests, correct answers for practice"
    )
    accuracy: int = Field(..., description="Rounded accuracy percentage")
    total_questions: int
    correct_answers: int
    duration_seconds: Optional[int] = None
    category_performance: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    is_practice: bool = False


class HistoryResponse(BaseModel):
    entries: List[HistoryEntryResponse]
    total_count: int


class UserStatsResponse(BaseModel):
    """Schema for aggregate statistics over a user's full tests."""

    total_tests: int
    average_score: int
    average_accuracy: int
    best_score: int
    recent_improvement: int = Field(
        ..., description="Mean accuracy of the last 3 tests minus the 3 before"
    )
    total_achievements: int
    earned_achievements: int


class PracticeStatsResponse(BaseModel):
    total_practices: int
    average_score: float
    best_score: float
    total_questions: int
    category_stats: Dict[str, Dict[str, Any]]


class AchievementResponse(BaseModel):
    id: str
    name: str
    description: str
    status: str = Field(..., description="locked or earned")
    progress: int
    total: int
    earned: Optional[str] = Field(None, description="When the achievement was earned")


class AchievementsResponse(BaseModel):
    achievements: List[AchievementResponse]
    earned_count: int


class ClearDataResponse(BaseModel):
    message: str
