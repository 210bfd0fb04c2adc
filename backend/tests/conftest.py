"""
Pytest configuration and shared fixtures for testing.
"""
import random
from contextlib import asynccontextmanager
from typing import Generator, List

import pytest
from fastapi.testclient import TestClient

from iqscalar.core.question_bank import QuestionBank
from iqscalar.models import Question
from iqscalar.services import AssessmentService
from iqscalar.storage import InMemoryStorage

CATEGORIES = ["alpha", "beta", "delta", "gamma"]


@asynccontextmanager
async def _test_lifespan(app):
    """No-op lifespan for tests.

    Skips loading the bundled question banks and connecting to storage; tests
    attach their own AssessmentService to ``app.state``.
    """
    yield


def create_test_application(service: AssessmentService):
    """Create the production app with the lifespan disabled and ``service`` attached."""
    from iqscalar.main import create_application

    test_app = create_application()
    test_app.router.lifespan_context = _test_lifespan
    test_app.state.assessment_service = service
    return test_app


def make_questions(per_category: int = 10, categories: List[str] = CATEGORIES) -> List[Question]:
    """Build ``per_category`` questions for each label; question N has correct_index N % 4."""
    questions = []
    n = 0
    for category in categories:
        for _ in range(per_category):
            questions.append(
                Question(
                    id=f"q{n}",
                    category=category,
                    prompt=f"Question {n} ({category})",
                    options=("w", "x", "y", "z"),
                    correct_index=n % 4,
                    explanation=f"Answer is option {n % 4}",
                )
            )
            n += 1
    return questions


def correct_answers_for(questions) -> List[int]:
    """Correct option index for each allocated (or bare) question, in order."""
    return [getattr(q, "question", q).correct_index for q in questions]


@pytest.fixture
def questions() -> List[Question]:
    """40 questions across 4 categories (10 each)."""
    return make_questions()


@pytest.fixture
def bank(questions) -> QuestionBank:
    return QuestionBank(questions, source="test")


@pytest.fixture
def practice_bank() -> QuestionBank:
    """Nine practice questions across 3 categories."""
    practice = [
        Question(
            id=f"p{i}",
            category=["logic", "numbers", "shapes"][i % 3],
            prompt=f"Practice {i}",
            options=("a", "b", "c"),
            correct_index=i % 3,
        )
        for i in range(9)
    ]
    return QuestionBank(practice, source="test-practice")


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for deterministic shuffles."""
    return random.Random(1234)


@pytest.fixture
def service(bank, practice_bank, storage, rng) -> AssessmentService:
    return AssessmentService(bank, storage, practice_bank=practice_bank, rng=rng)


@pytest.fixture
def client(service) -> Generator[TestClient, None, None]:
    """Test client backed by a fresh in-memory AssessmentService."""
    app = create_test_application(service)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def user_headers():
    return {"X-User-ID": "user-1"}
