"""Shared API dependencies for authentication and service wiring."""

import uuid
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from interaction_stage.db.session import get_db
from interaction_stage.services import IdentityResolver, InteractionService

# A missing header must yield 401, so the scheme does not raise on its own.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> uuid.UUID:
    """Resolve the caller's user id from the bearer token.

    Raises:
        AuthenticationError: Translated to a 401 response by the app.
    """
    token = credentials.credentials if credentials is not None else None
    return IdentityResolver(db).resolve(token)


def get_interaction_service(db: SessionDep) -> InteractionService:
    """Return an interaction service bound to the request session."""
    return InteractionService.for_session(db)


CurrentUserIdDep = Annotated[uuid.UUID, Depends(get_current_user_id)]
InteractionServiceDep = Annotated[InteractionService, Depends(get_interaction_service)]
