"""
Main API router that includes all endpoint routers
"""

from fastapi import APIRouter
from vtube.api.endpoints import videos, comments, follow

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(videos.router, prefix="/video", tags=["Videos"])
api_router.include_router(comments.router, prefix="/comment", tags=["Comments"])
api_router.include_router(follow.router, prefix="/follow", tags=["Follow"])
