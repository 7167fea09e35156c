from typing import Annotated, Any

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from task_summarizer.database import get_db
from task_summarizer.dependencies import get_ai_service
from task_summarizer.services.ai_service import AIService

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/health/ready")
async def readiness_check(db: Annotated[AsyncSession, Depends(get_db)]) -> dict[str, Any]:
    checks = {
        "database": "unhealthy",
    }

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except Exception as e:
        checks["database"] = f"unhealthy: {str(e)}"

    overall = "healthy" if all(v == "healthy" for v in checks.values()) else "unhealthy"

    return {
        "status": overall,
        "checks": checks,
    }


@router.get("/health/ai")
async def ai_health_check(
    ai_service: Annotated[AIService, Depends(get_ai_service)],
) -> dict[str, Any]:
    return await ai_service.check_health()
