"""
Domain models for the assessment engine.
"""
from .history import Achievement, HistoryEntry
from .question import AllocatedQuestion, Question, QuestionId, is_answer_index

__all__ = [
    "Question",
    "AllocatedQuestion",
    "QuestionId",
    "is_answer_index",
    "HistoryEntry",
    "Achievement",
]
