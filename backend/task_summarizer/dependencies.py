from datetime import timedelta
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from task_summarizer.config import get_settings
from task_summarizer.database import get_db
from task_summarizer.services.ai_service import AIService
from task_summarizer.services.clickup_client import ClickUpClient
from task_summarizer.services.credential_store import CredentialStore
from task_summarizer.services.oauth_service import OAuthService
from task_summarizer.services.session_store import SessionStore
from task_summarizer.services.summary_service import SummaryService
from task_summarizer.services.task_aggregator import TaskAggregator

settings = get_settings()


# Shared clients are built once in the app lifespan and kept on app.state
def get_clickup_client(request: Request) -> ClickUpClient:
    return request.app.state.clickup_client


def get_ai_service(request: Request) -> AIService:
    return request.app.state.ai_service


def get_credential_store(db: Annotated[AsyncSession, Depends(get_db)]) -> CredentialStore:
    return CredentialStore(db)


def get_session_store(db: Annotated[AsyncSession, Depends(get_db)]) -> SessionStore:
    return SessionStore(db, ttl=timedelta(hours=settings.session_ttl_hours))


def get_oauth_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    clickup: Annotated[ClickUpClient, Depends(get_clickup_client)],
    credentials: Annotated[CredentialStore, Depends(get_credential_store)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
) -> OAuthService:
    return OAuthService(db, clickup, credentials, sessions)


def get_task_aggregator(
    clickup: Annotated[ClickUpClient, Depends(get_clickup_client)],
) -> TaskAggregator:
    return TaskAggregator(clickup)


def get_summary_service(
    ai_service: Annotated[AIService, Depends(get_ai_service)],
) -> SummaryService:
    return SummaryService(ai_service)
