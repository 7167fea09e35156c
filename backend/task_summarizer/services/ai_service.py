import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel

from task_summarizer.config import Settings
from task_summarizer.services.errors import UpstreamError

logger = logging.getLogger(__name__)


class TextGenerationResult(BaseModel):
    content: str
    model: str


class AIService:
    """Text generation against an OpenAI-compatible chat-completions API."""

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings):
        self.http = http_client
        self.base_url = settings.ai_base_url.rstrip("/")
        self.api_key = settings.ai_api_key
        self.text_model = settings.ai_text_model
        self.temperature = settings.ai_temperature

    def _get_headers(self) -> dict:
        """Get headers for AI API requests, including auth if configured."""
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def check_health(self) -> dict:
        try:
            response = await self.http.get(
                f"{self.base_url}/models", headers=self._get_headers(), timeout=5
            )
        except httpx.RequestError as e:
            return {"status": "unhealthy", "url": self.base_url, "error": str(e)}

        if response.status_code != 200:
            return {
                "status": "unhealthy",
                "url": self.base_url,
                "error": f"HTTP {response.status_code}",
            }

        try:
            models = response.json().get("data", [])
        except ValueError:
            models = []
        return {
            "status": "healthy",
            "url": self.base_url,
            "text_model": self.text_model,
            "available_models": [m.get("id", "") for m in models if isinstance(m, dict)],
        }

    async def generate_text(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
    ) -> TextGenerationResult:
        """
        Generate a single chat completion.

        No retries: any HTTP, transport, or payload problem is raised as
        UpstreamError with whatever detail the endpoint returned.
        """
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            response = await self.http.post(
                f"{self.base_url}/chat/completions",
                headers=self._get_headers(),
                json={
                    "model": self.text_model,
                    "messages": messages,
                    "stream": False,
                    "temperature": self.temperature,
                },
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail: Any
            try:
                detail = e.response.json()
            except ValueError:
                detail = e.response.text[:500]
            logger.warning(f"HTTP error from text generation endpoint: {e}")
            raise UpstreamError(
                "Text generation failed",
                status_code=e.response.status_code,
                detail=detail,
            ) from e
        except httpx.RequestError as e:
            logger.warning(f"Request error from text generation endpoint: {e}")
            raise UpstreamError("Text generation failed", detail=str(e)) from e

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning(f"Malformed text generation response: {response.text[:200]}")
            raise UpstreamError(
                "Text generation returned a malformed response",
                status_code=response.status_code,
                detail=response.text[:500],
            ) from e

        if not isinstance(content, str) or not content.strip():
            raise UpstreamError("Text generation returned empty content", detail=data)

        used_model = data.get("model", self.text_model)
        logger.info(f"Text generation successful (model: {used_model})")
        return TextGenerationResult(content=content, model=used_model)
