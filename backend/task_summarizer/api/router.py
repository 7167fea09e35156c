from fastapi import APIRouter

from task_summarizer.api.auth import router as auth_router
from task_summarizer.api.health import router as health_router
from task_summarizer.api.summaries import router as summaries_router
from task_summarizer.api.users import router as users_router

api_router = APIRouter()

# Include sub-routers
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(summaries_router)
