"""
API v1 router aggregation.
"""
from fastapi import APIRouter
from app.api.v1.endpoints import (
    auth, flashcards, generations, learning_sessions, statistics
)

api_router = APIRouter()

# Include all endpoint routers
# Note: Each router already defines its own prefix, so we don't add another one here
api_router.include_router(auth.router)
api_router.include_router(flashcards.router)
api_router.include_router(generations.router)
api_router.include_router(learning_sessions.router)
api_router.include_router(statistics.router)
