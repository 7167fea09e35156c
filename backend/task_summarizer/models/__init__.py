"""Database models."""

from task_summarizer.models.identity import Identity
from task_summarizer.models.session import LoginSession

__all__ = [
    "Identity",
    "LoginSession",
]
