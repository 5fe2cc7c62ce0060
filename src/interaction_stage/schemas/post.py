"""Post-related Pydantic schemas."""

import uuid

from pydantic import BaseModel, ConfigDict


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    author_id: uuid.UUID | None
    body: str
    upvotes: int
    downvotes: int
    report_count: int
    is_active: bool
