import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from task_summarizer.services.clickup_client import ClickUpClient
from task_summarizer.services.credential_store import CredentialStore
from task_summarizer.services.errors import AuthenticationFailedError, ClientInputError, UpstreamError
from task_summarizer.services.session_store import SessionStore

logger = logging.getLogger(__name__)


@dataclass
class LoginResult:
    clickup_user_id: str
    access_token: str
    session_id: str


class OAuthService:
    def __init__(
        self,
        db: AsyncSession,
        clickup: ClickUpClient,
        credentials: CredentialStore,
        sessions: SessionStore,
    ):
        self.db = db
        self.clickup = clickup
        self.credentials = credentials
        self.sessions = sessions

    def authorization_url(self) -> str:
        return self.clickup.authorization_url()

    async def complete_login(self, code: str | None) -> LoginResult:
        """
        Exchange an authorization code and bind the user to a new session.

        Both upstream calls finish before anything is written, and the two
        store writes commit together, so a failure leaves no partial state.
        """
        if not code:
            raise ClientInputError("Missing authorization code")

        try:
            access_token = await self.clickup.exchange_code(code)
            user = await self.clickup.get_user(access_token)
        except UpstreamError as e:
            logger.error("OAuth exchange failed: %s (detail=%s)", e.message, e.detail)
            raise AuthenticationFailedError(
                "Authentication failed", status_code=e.status_code, detail=e.detail
            ) from e

        clickup_user_id = str(user["id"])
        try:
            await self.credentials.put(clickup_user_id, access_token, profile=user)
            session_id = await self.sessions.create(clickup_user_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info("ClickUp user %s logged in", clickup_user_id)
        return LoginResult(
            clickup_user_id=clickup_user_id,
            access_token=access_token,
            session_id=session_id,
        )
