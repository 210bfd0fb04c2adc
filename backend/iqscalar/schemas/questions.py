"""
Pydantic schemas for served questions and bank statistics.
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Union

from iqscalar.models import AllocatedQuestion


class QuestionResponse(BaseModel):
    """A question as served during a live attempt (no answer key)."""

    id: Union[str, int] = Field(..., description="Question ID")
    position: int = Field(..., ge=1, description="1-based display position")
    category: str = Field(..., description="Question category")
    question_text: str = Field(..., description="The question text")
    options: List[str] = Field(..., description="Answer options in display order")

    @classmethod
    def from_allocated(cls, allocated: AllocatedQuestion) -> "QuestionResponse":
        question = allocated.question
        return cls(
            id=question.id,
            position=allocated.position,
            category=question.category,
            question_text=question.prompt,
            options=list(question.options),
        )


class BankStatisticsResponse(BaseModel):
    """Schema for question bank statistics."""

    total_questions: int = Field(..., description="Number of questions in the bank")
    categories: int = Field(..., description="Number of distinct categories")
    questions_per_category: Dict[str, int] = Field(
        ..., description="Question count per category"
    )
    total_possible_tests: int = Field(
        ..., description="Full tests the bank can serve without repeats"
    )
    is_fallback: bool = Field(
        False, description="Whether the built-in fallback bank is in use"
    )


class PracticeCategoriesResponse(BaseModel):
    """Schema for available practice categories."""

    categories: List[str] = Field(..., description="Sorted category labels")
    questions_per_category: Dict[str, int] = Field(
        ..., description="Question count per category"
    )
