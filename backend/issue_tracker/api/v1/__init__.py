"""
API v1 router - aggregates all endpoint routers.
"""

from fastapi import APIRouter

from issue_tracker.api.v1.issues import router as issues_router
from issue_tracker.api.v1.properties import router as properties_router

api_router = APIRouter()

# Include all routers with their prefixes and tags
api_router.include_router(properties_router, prefix="/properties", tags=["Properties"])
api_router.include_router(issues_router, prefix="/issues", tags=["Issues"])
