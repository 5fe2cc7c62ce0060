"""Post read endpoints for the Interaction Stage API."""

from fastapi import APIRouter, HTTPException, status

from interaction_stage.models import Post
from interaction_stage.repositories import PostRepository
from interaction_stage.schemas.post import PostResponse

from ..dependencies import SessionDep

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: int,
    db: SessionDep,
) -> Post:
    """Get a post with its current vote and report counters.

    Raises:
        HTTPException: If the post does not exist.
    """
    post = PostRepository(db).get_by_id(post_id)
    if post is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found",
        )
    return post
