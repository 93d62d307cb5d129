"""SQLite persistence for cached remote responses."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from sqlmodel import Field, SQLModel, create_engine

from blogit.utils import utcnow


class CacheRecord(SQLModel, table=True):
    """One remembered value, stored as JSON."""

    key: str = Field(primary_key=True)
    payload_json: str
    stored_at: datetime = Field(default_factory=utcnow)
    expires_at: datetime | None = Field(default=None, index=True)


def create_engine_for_path(db_path: Path):
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"check_same_thread": False},
    )


def init_db(engine) -> None:
    SQLModel.metadata.create_all(engine)

