"""Database session configuration."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from interaction_stage.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import interaction_stage.models  # noqa: E402,F401


def store_connect_args(url: str, timeout_seconds: float | None) -> dict[str, Any]:
    """Return DBAPI connect arguments bounding how long one store call may wait."""
    if url.startswith("sqlite"):
        args: dict[str, Any] = {"check_same_thread": False}
        if timeout_seconds is not None:
            args["timeout"] = timeout_seconds
        return args
    if url.startswith("postgresql") and timeout_seconds is not None:
        return {"options": f"-c statement_timeout={int(timeout_seconds * 1000)}"}
    return {}


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """Turn on foreign key enforcement for every new SQLite connection."""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_engine(
    settings.effective_database_url,
    pool_pre_ping=True,
    echo=settings.sql_debug,
    connect_args=store_connect_args(
        settings.effective_database_url,
        settings.store_timeout_seconds,
    ),
)
enable_sqlite_foreign_keys(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

