from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class IdentityResponse(BaseModel):
    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )

    # The stored access token is deliberately not part of this schema
    clickup_user_id: str
    username: str | None = None
    email: str | None = None
    profile_picture: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class MeResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    logged_in: bool
    user: IdentityResponse | None = None


class ErrorResponse(BaseModel):
    error: str
    details: Any = Field(default=None)
