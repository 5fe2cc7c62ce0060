"""Report and vote endpoints for the Interaction Stage API."""

from fastapi import APIRouter, status
from fastapi.responses import PlainTextResponse

from interaction_stage.repositories import Found, InteractionRepository
from interaction_stage.schemas.interaction import (
    ErrorResponse,
    InteractionResponse,
    ReportRequest,
    VoteRequest,
)

from ..dependencies import CurrentUserIdDep, InteractionServiceDep, SessionDep

router = APIRouter(tags=["interactions"])

_FAILURE_RESPONSES: dict[int | str, dict[str, object]] = {
    status.HTTP_401_UNAUTHORIZED: {"description": "Unauthorized"},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


@router.post(
    "/report-post",
    response_class=PlainTextResponse,
    responses=_FAILURE_RESPONSES,
)
async def report_post(
    payload: ReportRequest,
    user_id: CurrentUserIdDep,
    service: InteractionServiceDep,
) -> PlainTextResponse:
    """Flag a post as reported by the caller."""
    service.report(payload.post_id, user_id)
    return PlainTextResponse("OK")


@router.post(
    "/toggle-vote",
    response_class=PlainTextResponse,
    responses=_FAILURE_RESPONSES,
)
async def toggle_vote(
    payload: VoteRequest,
    user_id: CurrentUserIdDep,
    service: InteractionServiceDep,
) -> PlainTextResponse:
    """Vote on a post; voting the same way twice retracts the vote."""
    service.toggle_vote(payload.post_id, user_id, payload.vote)
    return PlainTextResponse("OK")


@router.get("/interactions/{post_id}/mine", response_model=InteractionResponse)
async def get_my_interaction(
    post_id: int,
    user_id: CurrentUserIdDep,
    db: SessionDep,
) -> InteractionResponse:
    """Get the caller's current vote and report flag on a post."""
    lookup = InteractionRepository(db).find(post_id, user_id)
    if isinstance(lookup, Found):
        return InteractionResponse.model_validate(lookup.record)
    return InteractionResponse(post_id=post_id)
