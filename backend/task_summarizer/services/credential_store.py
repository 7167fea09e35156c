from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from task_summarizer.models.identity import Identity


def _insert_for(db: AsyncSession):
    if db.get_bind().dialect.name == "postgresql":
        return postgresql.insert
    return sqlite.insert


class CredentialStore:
    """ClickUp user id -> access token, one row per user."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def put(
        self,
        clickup_user_id: str,
        access_token: str,
        profile: Optional[dict[str, Any]] = None,
    ) -> Identity:
        profile = profile or {}
        values = {
            "clickup_user_id": clickup_user_id,
            "access_token": access_token,
            "username": profile.get("username"),
            "email": profile.get("email"),
            "profile_picture": profile.get("profilePicture"),
        }
        insert = _insert_for(self.db)
        stmt = insert(Identity).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Identity.clickup_user_id],
            set_={
                "access_token": stmt.excluded.access_token,
                "username": stmt.excluded.username,
                "email": stmt.excluded.email,
                "profile_picture": stmt.excluded.profile_picture,
                "updated_at": func.now(),
            },
        )
        await self.db.execute(stmt)
        await self.db.flush()

        result = await self.db.execute(
            select(Identity).where(Identity.clickup_user_id == clickup_user_id)
        )
        identity = result.scalar_one()
        await self.db.refresh(identity)
        return identity

    async def get(self, clickup_user_id: str) -> Optional[Identity]:
        result = await self.db.execute(
            select(Identity).where(Identity.clickup_user_id == clickup_user_id)
        )
        return result.scalar_one_or_none()

    async def get_access_token(self, clickup_user_id: str) -> Optional[str]:
        result = await self.db.execute(
            select(Identity.access_token).where(Identity.clickup_user_id == clickup_user_id)
        )
        return result.scalar_one_or_none()
