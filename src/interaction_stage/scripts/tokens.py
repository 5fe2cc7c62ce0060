# src/interaction_stage/scripts/tokens.py
"""Mint a bearer token for a user, creating the user row if needed.

Intended for local development and smoke tests against a running service:

    python -m interaction_stage.scripts.tokens --display-name alice
"""

from __future__ import annotations

import argparse
import sys
import uuid
from collections.abc import Sequence

from sqlalchemy.orm import Session

from interaction_stage.db.session import SessionLocal
from interaction_stage.models import User
from interaction_stage.services.identity import create_access_token


def ensure_user(db: Session, user_id: uuid.UUID | None, display_name: str | None) -> User:
    """Return the user with ``user_id``, inserting it when missing."""
    user = db.get(User, user_id) if user_id is not None else None
    if user is None:
        user = User(id=user_id or uuid.uuid4(), display_name=display_name)
        db.add(user)
        db.commit()
        db.refresh(user)
    return user


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Mint a development access token.")
    parser.add_argument("--user-id", type=uuid.UUID, default=None)
    parser.add_argument("--display-name", default=None)
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        user = ensure_user(db, args.user_id, args.display_name)
    finally:
        db.close()

    print(f"user_id={user.id}")
    print(create_access_token(user.id))
    return 0


if __name__ == "__main__":
    sys.exit(main())
