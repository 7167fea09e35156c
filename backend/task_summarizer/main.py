import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from task_summarizer.api.router import api_router
from task_summarizer.config import get_settings
from task_summarizer.database import create_tables, engine
from task_summarizer.services.ai_service import AIService
from task_summarizer.services.clickup_client import ClickUpClient

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings.validate_security()
    await create_tables()

    clickup_http = httpx.AsyncClient(timeout=settings.clickup_timeout)
    ai_http = httpx.AsyncClient(timeout=settings.ai_timeout)
    app.state.clickup_client = ClickUpClient(clickup_http, settings)
    app.state.ai_service = AIService(ai_http, settings)
    logger.info("Using text model %s at %s", settings.ai_text_model, settings.ai_base_url)

    try:
        yield
    finally:
        await clickup_http.aclose()
        await ai_http.aclose()
        await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="AI-generated summaries of ClickUp tasks",
    version="1.0.0",
    lifespan=lifespan,
)

# Session cookies are cross-site, so CORS must allow credentials for the frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url.rstrip("/")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Enable GZip compression for responses > 500 bytes
app.add_middleware(GZipMiddleware, minimum_size=500)
app.include_router(api_router)


def _validation_errors(errors: list) -> list[dict]:
    return [
        {"field": " -> ".join(str(loc) for loc in error["loc"]), "message": error["msg"]}
        for error in errors
    ]


# Global exception handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation error",
            "details": _validation_errors(exc.errors()),
        },
    )


@app.exception_handler(ValidationError)
async def pydantic_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation error",
            "details": _validation_errors(exc.errors()),
        },
    )


@app.exception_handler(SQLAlchemyError)
async def storage_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"Storage error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "Storage unavailable"},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")

    # Don't expose internal error details in production
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "An unexpected error occurred. Please try again later."},
    )
