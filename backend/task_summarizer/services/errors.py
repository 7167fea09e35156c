from typing import Any


class ClientInputError(Exception):
    """Request rejected before any upstream call was made."""


class UpstreamError(Exception):
    """A call to ClickUp or the generation API failed."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        detail: Any = None,
        token_invalid: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail
        self.token_invalid = token_invalid


class AuthenticationFailedError(UpstreamError):
    pass


class SummarizationFailedError(UpstreamError):
    pass
