import logging
from typing import Any, Optional
from urllib.parse import quote, urlencode

import httpx

from task_summarizer.config import Settings
from task_summarizer.services.errors import UpstreamError

logger = logging.getLogger(__name__)


def _error_detail(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text[:500]


def _is_token_rejection(response: httpx.Response, detail: Any) -> bool:
    if response.status_code == 401:
        return True
    # ClickUp reports bad/revoked tokens with OAUTH_* error codes
    if isinstance(detail, dict):
        return str(detail.get("ECODE", "")).startswith("OAUTH_")
    return False


class ClickUpClient:
    """Thin async wrapper over the ClickUp v2 REST API."""

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings):
        self.http = http_client
        self.api_url = settings.clickup_api_url.rstrip("/")
        self.auth_url = settings.clickup_auth_url
        self.client_id = settings.clickup_client_id
        self.client_secret = settings.clickup_client_secret
        self.redirect_uri = settings.clickup_redirect_uri

    def authorization_url(self) -> str:
        query = urlencode(
            {"client_id": self.client_id or "", "redirect_uri": self.redirect_uri},
            quote_via=quote,
        )
        return f"{self.auth_url}?{query}"

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        token: Optional[str] = None,
        **kwargs: Any,
    ) -> dict:
        headers = {"Authorization": token} if token else {}
        try:
            response = await self.http.request(
                method, f"{self.api_url}{path}", headers=headers, **kwargs
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = _error_detail(e.response)
            logger.warning(
                "ClickUp %s failed with HTTP %s: %s", operation, e.response.status_code, detail
            )
            raise UpstreamError(
                f"ClickUp {operation} failed",
                status_code=e.response.status_code,
                detail=detail,
                token_invalid=_is_token_rejection(e.response, detail),
            ) from e
        except httpx.RequestError as e:
            logger.warning("ClickUp %s request error: %s", operation, e)
            raise UpstreamError(f"ClickUp {operation} failed", detail=str(e)) from e

        try:
            data = response.json()
        except ValueError as e:
            logger.warning("ClickUp %s returned non-JSON body: %s", operation, response.text[:200])
            raise UpstreamError(
                f"ClickUp {operation} returned a malformed response",
                status_code=response.status_code,
            ) from e

        if not isinstance(data, dict):
            raise UpstreamError(
                f"ClickUp {operation} returned a malformed response",
                status_code=response.status_code,
                detail=data,
            )
        return data

    async def exchange_code(self, code: str) -> str:
        data = await self._request(
            "POST",
            "/oauth/token",
            "token exchange",
            json={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "code": code,
            },
        )
        access_token = data.get("access_token")
        if not access_token:
            raise UpstreamError("ClickUp token exchange returned no access_token")
        return access_token

    async def get_user(self, token: str) -> dict:
        data = await self._request("GET", "/user", "user lookup", token=token)
        user = data.get("user")
        if not isinstance(user, dict) or user.get("id") is None:
            raise UpstreamError("ClickUp user lookup returned no user id", detail=data)
        return user

    async def get_task(self, task_id: str, token: str) -> dict:
        return await self._request("GET", f"/task/{quote(task_id, safe='')}", "task fetch", token=token)

    async def get_task_comments(self, task_id: str, token: str) -> list[dict]:
        data = await self._request(
            "GET", f"/task/{quote(task_id, safe='')}/comment", "comment fetch", token=token
        )
        comments = data.get("comments") or []
        if not isinstance(comments, list):
            raise UpstreamError("ClickUp comment fetch returned a malformed response", detail=data)
        return [c for c in comments if isinstance(c, dict)]
