import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from task_summarizer.models.session import LoginSession

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=24)


class SessionStore:
    """Server-side sessions keyed by an opaque cookie value."""

    def __init__(self, db: AsyncSession, ttl: timedelta = DEFAULT_TTL):
        self.db = db
        self.ttl = ttl

    async def create(self, clickup_user_id: str) -> str:
        await self.purge_expired()

        session_id = secrets.token_urlsafe(32)
        self.db.add(
            LoginSession(
                id=session_id,
                clickup_user_id=clickup_user_id,
                expires_at=datetime.now(timezone.utc) + self.ttl,
            )
        )
        await self.db.flush()
        return session_id

    async def resolve(self, session_id: Optional[str]) -> Optional[str]:
        """Return the bound ClickUp user id, or None for unknown/expired sessions."""
        if not session_id:
            return None
        result = await self.db.execute(
            select(LoginSession.clickup_user_id).where(
                LoginSession.id == session_id,
                LoginSession.expires_at > datetime.now(timezone.utc),
            )
        )
        return result.scalar_one_or_none()

    async def purge_expired(self) -> int:
        result = await self.db.execute(
            delete(LoginSession)
            .where(LoginSession.expires_at <= datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            logger.debug("Purged %d expired sessions", result.rowcount)
        return result.rowcount or 0
