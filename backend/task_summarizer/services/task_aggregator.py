import asyncio
import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field

from task_summarizer.services.clickup_client import ClickUpClient
from task_summarizer.services.errors import ClientInputError

logger = logging.getLogger(__name__)

NO_COMMENTS_PLACEHOLDER = "No discussion comments available."
NOT_SET = "Not set"
UNKNOWN = "Unknown"
NO_PRIORITY = "None"
NO_DESCRIPTION = "No description provided."

MS_PER_HOUR = 3_600_000


def parse_clickup_timestamp(value: Any) -> Optional[datetime]:
    """ClickUp sends dates as epoch milliseconds, usually as strings."""
    if value is None or value == "":
        return None
    try:
        return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        logger.debug(f"Ignoring unparseable ClickUp timestamp: {value!r}")
        return None


def format_date(value: Optional[datetime]) -> str:
    if value is None:
        return NOT_SET
    return value.strftime("%Y-%m-%d")


def remaining_days_descriptor(due_date: Optional[datetime], now: datetime) -> str:
    if due_date is None:
        return "No due date"
    days = math.ceil((due_date - now) / timedelta(days=1))
    if days >= 0:
        return f"{days} days left"
    return "Overdue"


def estimate_hours(time_estimate_ms: Any) -> str:
    if time_estimate_ms is None or time_estimate_ms == "":
        return NOT_SET
    try:
        hours = float(time_estimate_ms) / MS_PER_HOUR
    except (TypeError, ValueError):
        return NOT_SET
    if not math.isfinite(hours):
        return NOT_SET
    # Half-up, not banker's rounding
    return f"{math.floor(hours + 0.5)} hrs"


def comments_text(comments: list[dict]) -> str:
    bodies = []
    for comment in comments:
        body = comment.get("comment_text")
        if isinstance(body, str) and body.strip():
            bodies.append(body.strip())
    if not bodies:
        return NO_COMMENTS_PLACEHOLDER
    return "\n".join(bodies)


def _nested_label(value: Any, key: str, default: str) -> str:
    # status/priority arrive as {"status": "open", "color": ...} objects
    if isinstance(value, dict):
        value = value.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _assignee_names(assignees: Any) -> list[str]:
    if not isinstance(assignees, list):
        return []
    names = []
    for assignee in assignees:
        if not isinstance(assignee, dict):
            continue
        name = assignee.get("username") or assignee.get("email") or assignee.get("initials")
        if name:
            names.append(str(name))
    return names


class TaskSnapshot(BaseModel):
    """Normalized view of one ClickUp task. Every field always has a value."""

    task_id: str
    name: str = UNKNOWN
    status: str = UNKNOWN
    priority: str = NO_PRIORITY
    assignees: list[str] = Field(default_factory=list)
    start_date: str = NOT_SET
    due_date: str = NOT_SET
    time_estimate: str = NOT_SET
    remaining_days: str = "No due date"
    description: str = NO_DESCRIPTION
    url: str = NOT_SET
    comments_text: str = NO_COMMENTS_PLACEHOLDER
    comment_count: int = 0

    @classmethod
    def from_clickup(
        cls,
        task_id: str,
        task: dict,
        comments: list[dict],
        now: datetime,
    ) -> "TaskSnapshot":
        due = parse_clickup_timestamp(task.get("due_date"))
        description = task.get("text_content") or task.get("description")
        name = task.get("name")

        return cls(
            task_id=task_id,
            name=name.strip() if isinstance(name, str) and name.strip() else UNKNOWN,
            status=_nested_label(task.get("status"), "status", UNKNOWN),
            priority=_nested_label(task.get("priority"), "priority", NO_PRIORITY),
            assignees=_assignee_names(task.get("assignees")),
            start_date=format_date(parse_clickup_timestamp(task.get("start_date"))),
            due_date=format_date(due),
            time_estimate=estimate_hours(task.get("time_estimate")),
            remaining_days=remaining_days_descriptor(due, now),
            description=description.strip()
            if isinstance(description, str) and description.strip()
            else NO_DESCRIPTION,
            url=task.get("url") or NOT_SET,
            comments_text=comments_text(comments),
            comment_count=sum(
                1 for c in comments if isinstance(c.get("comment_text"), str) and c["comment_text"].strip()
            ),
        )


class TaskAggregator:
    def __init__(self, clickup: ClickUpClient):
        self.clickup = clickup

    async def aggregate(
        self,
        task_id: str,
        access_token: str,
        now: Optional[datetime] = None,
    ) -> TaskSnapshot:
        task_id = (task_id or "").strip()
        if not task_id:
            raise ClientInputError("taskId is required")

        logger.info(f"Aggregating ClickUp task {task_id}")

        # Both reads are independent; wait for both before raising so
        # nothing keeps running after the request fails.
        task, comments = await asyncio.gather(
            self.clickup.get_task(task_id, access_token),
            self.clickup.get_task_comments(task_id, access_token),
            return_exceptions=True,
        )
        for result in (task, comments):
            if isinstance(result, BaseException):
                raise result

        return TaskSnapshot.from_clickup(
            task_id,
            task,
            comments,
            now=now or datetime.now(timezone.utc),
        )
