"""Service layer for business logic."""

from task_summarizer.services.ai_service import AIService
from task_summarizer.services.clickup_client import ClickUpClient
from task_summarizer.services.credential_store import CredentialStore
from task_summarizer.services.oauth_service import OAuthService
from task_summarizer.services.session_store import SessionStore
from task_summarizer.services.summary_service import SummaryService
from task_summarizer.services.task_aggregator import TaskAggregator, TaskSnapshot

__all__ = [
    "AIService",
    "ClickUpClient",
    "CredentialStore",
    "OAuthService",
    "SessionStore",
    "SummaryService",
    "TaskAggregator",
    "TaskSnapshot",
]
