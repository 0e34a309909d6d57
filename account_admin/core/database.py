"""Database configuration and session helpers."""

from __future__ import annotations

import os
from typing import Iterator

from sqlmodel import Session, create_engine

DATA_DIR = "data"


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    # Relative to the working directory, not the installed package.
    os.makedirs(DATA_DIR, exist_ok=True)
    return f"sqlite:///./{DATA_DIR}/app.db"


DATABASE_URL = _database_url()

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
    pool_pre_ping=True,
)


def get_session() -> Iterator[Session]:
    """FastAPI dependency that yields a database session."""

    with Session(engine) as session:
        yield session


__all__ = ["DATABASE_URL", "engine", "get_session"]
