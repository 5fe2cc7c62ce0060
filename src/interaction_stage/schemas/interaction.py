"""Interaction-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field

from interaction_stage.models import VoteValue


class ReportRequest(BaseModel):
    """Schema for reporting a post."""

    post_id: int


class VoteRequest(BaseModel):
    """Schema for toggling a vote on a post."""

    post_id: int
    vote: VoteValue = Field(..., description="'up' or 'down'; repeating the current vote clears it")


class InteractionResponse(BaseModel):
    """The caller's standing interaction with a post."""

    model_config = ConfigDict(from_attributes=True)

    post_id: int
    vote: VoteValue | None = None
    is_reported: bool = False


class ErrorResponse(BaseModel):
    """Body returned when the record store fails."""

    error: str
