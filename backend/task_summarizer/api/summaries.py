import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from task_summarizer.database import get_db
from task_summarizer.dependencies import get_summary_service, get_task_aggregator
from task_summarizer.schemas.identity import ErrorResponse
from task_summarizer.schemas.summary import SummarizeRequest, SummaryResult
from task_summarizer.services.errors import (
    ClientInputError,
    SummarizationFailedError,
    UpstreamError,
)
from task_summarizer.services.summary_service import SummaryService
from task_summarizer.services.task_aggregator import TaskAggregator
from task_summarizer.utils.auth import CurrentIdentityOptional

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Summaries"])


def _error(status_code: int, error: str, details: object = None) -> JSONResponse:
    content: dict = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


async def _read_task_id(request: Request) -> str:
    if not (await request.body()).strip():
        return ""
    try:
        payload = await request.json()
    except ValueError as e:
        raise ClientInputError("Request body must be JSON") from e
    try:
        return SummarizeRequest.model_validate(payload).task_id
    except ValidationError as e:
        raise ClientInputError("taskId must be a string of at most 255 characters") from e


@router.post(
    "/summarize",
    response_model=SummaryResult,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
    # Body is parsed in the handler, after the login check
    openapi_extra={
        "requestBody": {
            "content": {
                "application/json": {"schema": SummarizeRequest.model_json_schema(by_alias=True)}
            },
        }
    },
)
async def summarize_task(
    request: Request,
    identity: CurrentIdentityOptional,
    db: Annotated[AsyncSession, Depends(get_db)],
    aggregator: Annotated[TaskAggregator, Depends(get_task_aggregator)],
    summary_service: Annotated[SummaryService, Depends(get_summary_service)],
):
    if identity is None:
        return _error(status.HTTP_401_UNAUTHORIZED, "Login required")

    access_token = identity.access_token
    logger.debug("summarize: authenticated as %s", identity.clickup_user_id)
    # Return the connection to the pool before the slow upstream calls
    await db.commit()

    try:
        task_id = await _read_task_id(request)
        logger.debug("summarize[%s]: aggregating", task_id)
        snapshot = await aggregator.aggregate(task_id, access_token)
    except ClientInputError as e:
        return _error(status.HTTP_400_BAD_REQUEST, str(e))
    except UpstreamError as e:
        logger.error(
            "summarize[%s]: ClickUp fetch failed (%s): %s", task_id, e.status_code, e.detail
        )
        if e.token_invalid:
            return _error(
                status.HTTP_502_BAD_GATEWAY,
                "ClickUp authorization expired",
                {"tokenInvalid": True, "upstream": e.detail},
            )
        return _error(status.HTTP_502_BAD_GATEWAY, "Failed to fetch task from ClickUp", e.detail)

    try:
        logger.debug("summarize[%s]: generating", task_id)
        result = await summary_service.summarize(snapshot)
    except SummarizationFailedError as e:
        return _error(status.HTTP_502_BAD_GATEWAY, e.message, e.detail)

    logger.info("summarize[%s]: complete (%s)", task_id, snapshot.remaining_days)
    return result
