"""
Health check and status endpoints.
"""
from fastapi import APIRouter, Depends

from iqscalar.api.deps import get_assessment_service
from iqscalar.core import settings
from iqscalar.core.datetime_utils import utc_now
from iqscalar.services import AssessmentService

router = APIRouter()


@router.get("/health")
async def health_check(service: AssessmentService = Depends(get_assessment_service)):
    """
    Health check endpoint.
    Returns basic health status of the API and which question banks are loaded.
    """
    return {
        "status": "healthy",
        "timestamp": utc_now().isoformat(),
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "question_bank": {
            "source": service.bank.source,
            "questions": len(service.bank),
            "is_fallback": service.bank.is_fallback,
        },
        "practice_bank": {
            "source": service.practice_bank.source,
            "questions": len(service.practice_bank),
            "is_fallback": service.practice_bank.is_fallback,
        },
    }


@router.get("/ping")
async def ping():
    """
    Simple ping endpoint for basic connectivity testing.
    """
    return {"message": "pong"}
