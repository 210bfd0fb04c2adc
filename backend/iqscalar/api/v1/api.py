"""
API v1 router combining all v1 endpoints.
"""
from fastapi import APIRouter
from iqscalar.api.v1 import daily, health, practice, test, user

api_router = APIRouter()

# Include all v1 routers
api_router.include_router(health.router, tags=["health"])
api_router.include_router(test.router, prefix="/test", tags=["test"])
api_router.include_router(practice.router, prefix="/practice", tags=["practice"])
api_router.include_router(daily.router, prefix="/daily", tags=["daily"])
api_router.include_router(user.router, prefix="/user", tags=["user"])
