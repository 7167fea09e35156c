from typing import Annotated, Optional

from fastapi import Depends, Request

from task_summarizer.config import get_settings
from task_summarizer.dependencies import get_credential_store, get_session_store
from task_summarizer.models.identity import Identity
from task_summarizer.services.credential_store import CredentialStore
from task_summarizer.services.session_store import SessionStore

settings = get_settings()


async def get_current_identity_optional(
    request: Request,
    sessions: Annotated[SessionStore, Depends(get_session_store)],
    credentials: Annotated[CredentialStore, Depends(get_credential_store)],
) -> Optional[Identity]:
    """
    Resolve the session cookie to a stored ClickUp identity.
    Returns None for missing, unknown, or expired sessions.
    """
    session_id = request.cookies.get(settings.session_cookie_name)
    clickup_user_id = await sessions.resolve(session_id)
    if clickup_user_id is None:
        return None
    return await credentials.get(clickup_user_id)


# Type alias for dependency injection
CurrentIdentityOptional = Annotated[Optional[Identity], Depends(get_current_identity_optional)]
