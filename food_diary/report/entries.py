from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple


class SortOrder(str, Enum):
    NEWEST_FIRST = "newest"
    OLDEST_FIRST = "oldest"


@dataclass(frozen=True)
class PhotoRecord:
    data: bytes
    mime_type: str = "image/jpeg"


@dataclass(frozen=True)
class DiaryEntry:
    captured_at: datetime
    meal_name: str = ""
    dish_components: str = ""
    place: str = ""
    ed_behaviors: str = ""
    feelings: str = ""
    comments: str = ""
    fullness_before: Optional[int] = None
    fullness_after: Optional[int] = None
    photos: Tuple[PhotoRecord, ...] = field(default_factory=tuple)
    id: Optional[int] = None


@dataclass(frozen=True)
class DayGroup:
    day: date
    entries: Tuple[DiaryEntry, ...]


def local_day(moment: datetime, tz: Optional[tzinfo] = None) -> date:
    # astimezone(None) converts to the system's local zone.
    return moment.astimezone(tz).date()


def filter_window(entries: Iterable[DiaryEntry], window_days: int, now: datetime) -> List[DiaryEntry]:
    """Keep entries captured at or after ``now - window_days``."""
    cutoff = now - timedelta(days=window_days)
    return [entry for entry in entries if entry.captured_at >= cutoff]


def group_by_day(
    entries: Iterable[DiaryEntry],
    order: SortOrder = SortOrder.NEWEST_FIRST,
    tz: Optional[tzinfo] = None,
) -> List[DayGroup]:
    """
    Bucket entries by local calendar date.

    Groups are always newest day first; ``order`` only controls the order of
    entries inside each group.
    """
    buckets: Dict[date, List[DiaryEntry]] = defaultdict(list)
    for entry in entries:
        buckets[local_day(entry.captured_at, tz)].append(entry)

    newest_first = order == SortOrder.NEWEST_FIRST
    groups: List[DayGroup] = []
    for day in sorted(buckets, reverse=True):
        items = sorted(buckets[day], key=lambda e: e.captured_at, reverse=newest_first)
        groups.append(DayGroup(day=day, entries=tuple(items)))
    return groups
