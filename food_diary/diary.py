from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from sqlmodel import Session, select

from .config import MAX_PHOTOS
from .models import Entry, Photo, get_session, init_db
from .report.entries import DiaryEntry, PhotoRecord


logger = logging.getLogger(__name__)

TEXT_FIELDS = ("dish_components", "place", "ed_behaviors", "feelings", "comments")


def _to_storage_time(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        # Naive input is local wall-clock time.
        moment = moment.astimezone()
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def _from_storage_time(moment: datetime) -> datetime:
    return moment.replace(tzinfo=timezone.utc)


def _validate(meal_name: str, photos: Sequence[PhotoRecord]) -> str:
    name = (meal_name or "").strip()
    if not name:
        raise ValueError("Meal Name is required")
    if len(photos) > MAX_PHOTOS:
        raise ValueError(f"Maximum of {MAX_PHOTOS} photos per entry")
    return name


def _apply(record: Entry, entry: DiaryEntry, meal_name: str) -> None:
    record.captured_at = _to_storage_time(entry.captured_at)
    record.meal_name = meal_name
    for field_name in TEXT_FIELDS:
        setattr(record, field_name, str(getattr(entry, field_name) or "").strip())
    record.fullness_before = entry.fullness_before or None
    record.fullness_after = entry.fullness_after or None


def _photo_rows(entry_id: int, photos: Iterable[PhotoRecord]) -> List[Photo]:
    return [
        Photo(entry_id=entry_id, position=index, data=photo.data, mime_type=photo.mime_type)
        for index, photo in enumerate(photos)
    ]


def _drop_photos(session: Session, entry_id: int) -> None:
    for photo in session.exec(select(Photo).where(Photo.entry_id == entry_id)).all():
        session.delete(photo)


def _to_view(record: Entry, photos: Iterable[Photo]) -> DiaryEntry:
    return DiaryEntry(
        id=record.id,
        captured_at=_from_storage_time(record.captured_at),
        meal_name=record.meal_name,
        dish_components=record.dish_components,
        place=record.place,
        ed_behaviors=record.ed_behaviors,
        feelings=record.feelings,
        comments=record.comments,
        fullness_before=record.fullness_before,
        fullness_after=record.fullness_after,
        photos=tuple(PhotoRecord(data=p.data, mime_type=p.mime_type) for p in photos),
    )


def add_entry(entry: DiaryEntry) -> DiaryEntry:
    init_db()
    meal_name = _validate(entry.meal_name, entry.photos)
    record = Entry(captured_at=_to_storage_time(entry.captured_at), meal_name=meal_name)
    _apply(record, entry, meal_name)
    with get_session() as session:
        session.add(record)
        session.flush()
        photos = _photo_rows(record.id, entry.photos)
        session.add_all(photos)
        session.commit()
        session.refresh(record)
    logger.info("Added entry %s (%s)", record.id, meal_name)
    return _to_view(record, photos)


def update_entry(entry_id: int, entry: DiaryEntry) -> DiaryEntry:
    """Replace every field and photo of an existing entry."""
    init_db()
    meal_name = _validate(entry.meal_name, entry.photos)
    with get_session() as session:
        record = session.get(Entry, entry_id)
        if record is None:
            raise LookupError(f"Entry not found: {entry_id}")
        _apply(record, entry, meal_name)
        session.add(record)
        _drop_photos(session, entry_id)
        photos = _photo_rows(entry_id, entry.photos)
        session.add_all(photos)
        session.commit()
        session.refresh(record)
    logger.info("Updated entry %s", entry_id)
    return _to_view(record, photos)


def delete_entry(entry_id: int) -> None:
    init_db()
    with get_session() as session:
        record = session.get(Entry, entry_id)
        if record is None:
            raise LookupError(f"Entry not found: {entry_id}")
        _drop_photos(session, entry_id)
        session.delete(record)
        session.commit()
    logger.info("Deleted entry %s", entry_id)


def get_entry(entry_id: int) -> DiaryEntry:
    init_db()
    with get_session() as session:
        record = session.get(Entry, entry_id)
        if record is None:
            raise LookupError(f"Entry not found: {entry_id}")
        photos = session.exec(
            select(Photo).where(Photo.entry_id == entry_id).order_by(Photo.position)
        ).all()
        return _to_view(record, photos)


def list_entries() -> List[DiaryEntry]:
    """Every stored entry, newest first."""
    init_db()
    with get_session() as session:
        records = session.exec(select(Entry).order_by(Entry.captured_at.desc())).all()
        photos_by_entry: Dict[int, List[Photo]] = {}
        for photo in session.exec(select(Photo).order_by(Photo.entry_id, Photo.position)):
            photos_by_entry.setdefault(photo.entry_id, []).append(photo)
        return [_to_view(record, photos_by_entry.get(record.id, [])) for record in records]


def duplicate_entry(entry_id: int, now: Optional[datetime] = None) -> DiaryEntry:
    """Copy an entry, stamped with the current time so it lists first."""
    source = get_entry(entry_id)
    stamp = now or datetime.now(timezone.utc)
    return add_entry(replace(source, id=None, captured_at=stamp))


def load_diary() -> List[DiaryEntry]:
    return list_entries()
