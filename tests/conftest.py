from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Sequence

import pytest

from food_diary import config, models
from food_diary.report.entries import DiaryEntry, PhotoRecord
from food_diary.report.images import PreparedPhoto
from food_diary.report.text import wrap_text


LETTER_MM = (215.9, 279.4)


@dataclass
class Call:
    kind: str
    page: int
    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0
    lines: List[str] = field(default_factory=list)
    bold: bool = False
    size: float = 0.0
    leading: float = 0.0
    data: bytes = b""


class RecordingCanvas:
    """Fake page canvas that records draw calls; every character is 0.2mm per point."""

    def __init__(self, page_width: float = LETTER_MM[0], page_height: float = LETTER_MM[1]) -> None:
        self.page_width = page_width
        self.page_height = page_height
        self.page = 0
        self.calls: List[Call] = []
        self.rendered = False

    def add_page(self) -> None:
        self.page += 1

    def text(self, lines: Sequence[str], x: float, y: float, *, bold=False, size=10, leading=4) -> None:
        self.calls.append(
            Call("text", self.page, x=x, y=y, lines=list(lines), bold=bold, size=size, leading=leading)
        )

    def image(self, data: bytes, x: float, y: float, w: float, h: float) -> None:
        self.calls.append(Call("image", self.page, x=x, y=y, w=w, h=h, data=data))

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self.calls.append(Call("line", self.page, x=x1, y=y1, w=x2 - x1, h=y2 - y1))

    def text_width(self, text: str, *, bold=False, size=10) -> float:
        return len(text) * size * 0.2

    def wrap(self, text: str, max_width: float, *, bold=False, size=10) -> List[str]:
        return wrap_text(text, max_width, lambda s: self.text_width(s, bold=bold, size=size))

    def render(self) -> bytes:
        self.rendered = True
        return repr(self.calls).encode("utf-8")

    # helpers for assertions

    def of(self, kind: str, page: Optional[int] = None) -> List[Call]:
        return [c for c in self.calls if c.kind == kind and (page is None or c.page == page)]

    def strings(self, page: Optional[int] = None) -> List[str]:
        return [line for c in self.of("text", page) for line in c.lines]


def fake_photo(width: int, height: int) -> PhotoRecord:
    return PhotoRecord(data=f"{width}x{height}".encode(), mime_type="image/fake")


def fake_loader(photo: PhotoRecord) -> PreparedPhoto:
    width, height = (int(v) for v in photo.data.decode().split("x"))
    return PreparedPhoto(data=photo.data, width=width, height=height)


def at(hour: int, minute: int = 0, day: int = 18) -> datetime:
    return datetime(2026, 10, day, hour, minute, tzinfo=timezone.utc)


def make_entry(captured_at: datetime, meal_name: str = "Lunch", **fields) -> DiaryEntry:
    return DiaryEntry(captured_at=captured_at, meal_name=meal_name, **fields)


@pytest.fixture
def restore_out_dir():
    """Point config and the engine back at the original out dir after a test moves them."""
    saved = config.OUT_DIR
    yield
    models.engine.dispose()
    config.set_out_dir(saved)
    models.reset_engine()


@pytest.fixture
def recording_canvas() -> RecordingCanvas:
    return RecordingCanvas()
