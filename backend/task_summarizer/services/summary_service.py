import logging

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from task_summarizer.services.ai_service import AIService
from task_summarizer.services.errors import SummarizationFailedError, UpstreamError
from task_summarizer.services.task_aggregator import TaskSnapshot

logger = logging.getLogger(__name__)

SECTION_HEADERS = (
    "Task Overview",
    "Timeline",
    "Key Updates from Discussion",
    "Pending Work / Risks",
)

SYSTEM_PROMPT = (
    "You are a project assistant that writes short, factual status summaries "
    "of ClickUp tasks for busy teammates."
)

PROMPT_TEMPLATE = """Summarize the ClickUp task below.

Your response MUST contain exactly these four markdown sections, in this order:
{sections}

Rules:
- Use bullet points only under each section. No paragraphs.
- Use only the data given below. Do not invent dates, people, or decisions.
- If a section has nothing to report, write a single bullet saying so.
- Keep the tone concise and neutral.

---TASK DATA---
Task ID: {task_id}
Name: {name}
Status: {status}
Priority: {priority}
Assignees: {assignees}
Start date: {start_date}
Due date: {due_date}
Remaining: {remaining_days}
Time estimate: {time_estimate}
URL: {url}
Description:
{description}
---END TASK DATA---

---DISCUSSION ({comment_count} comments, in the order ClickUp returned them)---
{comments_text}
---END DISCUSSION---
"""


class SummaryMeta(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    remaining_days: str
    task_name: str
    status: str


class SummaryResult(BaseModel):
    summary: str
    meta: SummaryMeta


def build_prompt(snapshot: TaskSnapshot) -> str:
    return PROMPT_TEMPLATE.format(
        sections="\n".join(f"## {header}" for header in SECTION_HEADERS),
        task_id=snapshot.task_id,
        name=snapshot.name,
        status=snapshot.status,
        priority=snapshot.priority,
        assignees=", ".join(snapshot.assignees) if snapshot.assignees else "Unassigned",
        start_date=snapshot.start_date,
        due_date=snapshot.due_date,
        remaining_days=snapshot.remaining_days,
        time_estimate=snapshot.time_estimate,
        url=snapshot.url,
        description=snapshot.description,
        comment_count=snapshot.comment_count,
        comments_text=snapshot.comments_text,
    )


class SummaryService:
    def __init__(self, ai_service: AIService):
        self.ai_service = ai_service

    async def summarize(self, snapshot: TaskSnapshot) -> SummaryResult:
        prompt = build_prompt(snapshot)
        try:
            result = await self.ai_service.generate_text(prompt, system_prompt=SYSTEM_PROMPT)
        except UpstreamError as e:
            logger.error(
                "Summary generation failed for task %s: %s (detail=%s)",
                snapshot.task_id,
                e.message,
                e.detail,
            )
            raise SummarizationFailedError(
                "Failed to summarize task",
                status_code=e.status_code,
                detail=e.detail if e.detail is not None else e.message,
            ) from e

        return SummaryResult(
            summary=result.content,
            meta=SummaryMeta(
                remaining_days=snapshot.remaining_days,
                task_name=snapshot.name,
                status=snapshot.status,
            ),
        )
