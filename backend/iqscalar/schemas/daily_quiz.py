"""
Pydantic schemas for the daily quiz endpoints.
"""
from pydantic import BaseModel, Field, StrictInt
from typing import List, Optional, Union


class DailyQuestionResponse(BaseModel):
    """Schema for the question of the day (no answer key)."""

    daily_quiz_id: str = Field(..., description="daily_<date>_<index>")
    date: str = Field(..., description="Calendar date (YYYY-MM-DD, UTC)")
    id: Union[str, int]
    category: str
    question_text: str
    options: List[str]
    has_answered: bool = Field(..., description="Whether the caller already answered")


class DailyAnswerRequest(BaseModel):
    answer_index: Optional[StrictInt] = Field(
        ..., description="Selected option index (null counts as wrong)"
    )


class DailyAnswerResultResponse(BaseModel):
    """Schema for the result of a daily quiz submission."""

    date: str
    daily_quiz_id: str
    is_correct: bool
    correct_answer: str
    user_answer: str
    explanation: str


class DailyAnswerRecordResponse(BaseModel):
    """Schema for a stored daily answer."""

    answered: bool
    answer_index: Optional[int]
    is_correct: bool
    question_id: Optional[Union[str, int]] = None
    daily_quiz_id: Optional[str] = None
    question: str
    correct_index: int
    explanation: str
    timestamp: str


class DailyStatsResponse(BaseModel):
    total_answered: int
    correct_answers: int
    accuracy: int = Field(..., description="Rounded accuracy percentage")
    current_streak: int
    best_streak: int
