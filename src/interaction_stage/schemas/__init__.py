"""Pydantic schemas for API requests and responses."""

from .interaction import ErrorResponse, InteractionResponse, ReportRequest, VoteRequest
from .post import PostResponse

__all__ = [
    "ErrorResponse",
    "InteractionResponse",
    "PostResponse",
    "ReportRequest",
    "VoteRequest",
]
