from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel, create_engine, Session

from . import config


class Entry(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    # Naive UTC; converted to an aware datetime when read for export.
    captured_at: datetime = Field(index=True)
    meal_name: str
    dish_components: str = ""
    place: str = ""
    ed_behaviors: str = ""
    feelings: str = ""
    comments: str = ""
    fullness_before: Optional[int] = None
    fullness_after: Optional[int] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Photo(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    entry_id: int = Field(foreign_key="entry.id", index=True)
    position: int = 0
    data: bytes
    mime_type: str = "image/jpeg"


engine = create_engine(f"sqlite:///{config.DB_PATH}")


def reset_engine() -> None:
    global engine
    engine = create_engine(f"sqlite:///{config.DB_PATH}")


def init_db() -> None:
    config.OUT_DIR.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(engine)


def get_session() -> Session:
    return Session(engine, expire_on_commit=False)
