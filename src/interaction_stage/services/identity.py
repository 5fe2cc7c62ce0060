"""Bearer token resolution to a verified user identifier."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from interaction_stage.core.settings import settings
from interaction_stage.models import User
from interaction_stage.repositories.base import store_call


class AuthenticationError(Exception):
    """Raised when no verifiable user can be derived from a credential."""


def create_access_token(
    user_id: uuid.UUID | str,
    extra_claims: dict[str, str] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token for ``user_id``."""
    to_encode: dict[str, object] = {"sub": str(user_id)}
    if extra_claims:
        to_encode.update(extra_claims)
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


class IdentityResolver:
    """Turn a bearer credential into the id of an existing user."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def resolve(self, token: str | None) -> uuid.UUID:
        """Return the user id encoded in ``token``.

        Raises:
            AuthenticationError: If the token is missing, invalid, expired, or
                names a user that does not exist.
        """
        if not token:
            raise AuthenticationError("Missing credentials")
        try:
            payload = jwt.decode(
                token,
                settings.secret_key,
                algorithms=[settings.jwt_algorithm],
            )
        except JWTError as err:
            raise AuthenticationError("Could not validate credentials") from err

        subject = payload.get("sub")
        if not isinstance(subject, str):
            raise AuthenticationError("Could not validate credentials")
        try:
            user_id = uuid.UUID(subject)
        except ValueError as err:
            raise AuthenticationError("Could not validate credentials") from err

        with store_call(self.session, "get_user"):
            user = self.session.get(User, user_id)
        if user is None:
            raise AuthenticationError("User not found")
        return user.id
