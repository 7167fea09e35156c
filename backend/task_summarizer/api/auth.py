import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse, Response
from sqlalchemy.exc import SQLAlchemyError

from task_summarizer.config import get_settings
from task_summarizer.dependencies import get_clickup_client, get_oauth_service
from task_summarizer.services.clickup_client import ClickUpClient
from task_summarizer.services.errors import AuthenticationFailedError, ClientInputError
from task_summarizer.services.oauth_service import OAuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])
settings = get_settings()

SUPPORTED_PROVIDERS = {"clickup"}


def set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )


@router.get("/auth/{provider}")
async def start_login(
    provider: str,
    clickup: Annotated[ClickUpClient, Depends(get_clickup_client)],
) -> Response:
    if provider.lower() not in SUPPORTED_PROVIDERS:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "Unsupported provider"},
        )
    return RedirectResponse(url=clickup.authorization_url())


@router.get("/oauth/callback")
async def oauth_callback(
    oauth: Annotated[OAuthService, Depends(get_oauth_service)],
    code: Optional[str] = None,
) -> Response:
    try:
        result = await oauth.complete_login(code)
    except ClientInputError as e:
        return PlainTextResponse(str(e), status_code=status.HTTP_400_BAD_REQUEST)
    except AuthenticationFailedError:
        return PlainTextResponse(
            "OAuth failed", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )
    except SQLAlchemyError as e:
        logger.error(f"Storing ClickUp login failed: {e}")
        return PlainTextResponse(
            "OAuth failed", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    response = RedirectResponse(
        url=f"{settings.frontend_url.rstrip('/')}/dashboard",
        status_code=status.HTTP_302_FOUND,
    )
    set_session_cookie(response, result.session_id)
    return response
