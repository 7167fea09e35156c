from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from task_summarizer.services.summary_service import SummaryMeta, SummaryResult


class SummarizeRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Blank ids are rejected by the aggregator with a 400, not a 422
    task_id: str = Field(default="", max_length=255)


__all__ = ["SummarizeRequest", "SummaryMeta", "SummaryResult"]
