"""
Application configuration settings.
"""

from pathlib import Path
from typing import List, Literal, Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Bundled question banks live next to the package (backend/data)
DATA_DIR = Path(__file__).resolve().parent.parent.parent / "data"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "IQScalar API"
    APP_VERSION: str = "0.1.0"
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # API
    API_V1_PREFIX: str = "/v1"

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8080",
    ]

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Question banks
    # Either an http(s) URL or a local file path
    QUESTION_BANK_SOURCE: str = str(DATA_DIR / "IQ_Test_Questions.json")
    PRACTICE_BANK_SOURCE: str = str(DATA_DIR / "Practice_Questions.json")
    BANK_FETCH_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0.0,
        description="Timeout for fetching a remote question bank (seconds)",
    )

    # Test composition
    TEST_TOTAL_QUESTIONS: int = 15
    PRACTICE_DEFAULT_QUESTIONS: int = 10
    MAX_QUESTIONS_PER_REQUEST: int = 100

    # User history
    HISTORY_MAX_ENTRIES: int = 50

    # Storage backend: "memory" for single-worker, "redis" for multi-worker deployments
    STORAGE_BACKEND: Literal["memory", "redis"] = "memory"
    STORAGE_REDIS_URL: str = "redis://localhost:6379/0"
    # Unsubmitted test/practice sessions expire after this many seconds
    SESSION_TTL_SECONDS: int = 4 * 60 * 60

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields from .env not defined in Settings
    )

    @model_validator(mode="after")
    def validate_question_counts(self) -> Self:
        """Validate default question counts against the per-request maximum."""
        counts = {
            "TEST_TOTAL_QUESTIONS": self.TEST_TOTAL_QUESTIONS,
            "PRACTICE_DEFAULT_QUESTIONS": self.PRACTICE_DEFAULT_QUESTIONS,
            "MAX_QUESTIONS_PER_REQUEST": self.MAX_QUESTIONS_PER_REQUEST,
            "HISTORY_MAX_ENTRIES": self.HISTORY_MAX_ENTRIES,
        }
        non_positive = [name for name, value in counts.items() if value < 1]
        if non_positive:
            raise ValueError(f"Settings must be positive, got non-positive: {non_positive}")
        if self.TEST_TOTAL_QUESTIONS > self.MAX_QUESTIONS_PER_REQUEST:
            raise ValueError(
                f"TEST_TOTAL_QUESTIONS ({self.TEST_TOTAL_QUESTIONS}) cannot exceed "
                f"MAX_QUESTIONS_PER_REQUEST ({self.MAX_QUESTIONS_PER_REQUEST})"
            )
        return self


settings = Settings()
