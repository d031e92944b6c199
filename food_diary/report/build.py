from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Callable, Iterable, Optional

from ..diary import load_diary
from ..errors import EmptyRangeError
from ..storage import report_filename, save_report
from .canvas import PageCanvas, ReportLabCanvas
from .entries import DiaryEntry, SortOrder, filter_window, group_by_day
from .images import PhotoLoader, prepare_photo
from .layout import ReportLayoutMode, layout_report


logger = logging.getLogger(__name__)


def build_report(
    entries: Iterable[DiaryEntry],
    window_days: int,
    *,
    now: Optional[datetime] = None,
    mode: ReportLayoutMode = ReportLayoutMode.STACKED,
    order: SortOrder = SortOrder.NEWEST_FIRST,
    tz: Optional[tzinfo] = None,
    photo_loader: PhotoLoader = prepare_photo,
    canvas_factory: Callable[[], PageCanvas] = ReportLabCanvas,
) -> bytes:
    """
    Lay out every entry captured in the last ``window_days`` days and return
    the finished PDF bytes.

    Raises ``EmptyRangeError`` when nothing falls inside the window. Nothing is
    written to disk here.
    """
    if window_days < 0:
        raise ValueError(f"window_days must be non-negative, got {window_days}")
    now = now or datetime.now(timezone.utc)

    selected = filter_window(entries, window_days, now)
    if not selected:
        raise EmptyRangeError(window_days)

    groups = group_by_day(selected, order=order, tz=tz)
    logger.info(
        "Building %s report: %d entries in %d days (window %d days)",
        mode.value,
        len(selected),
        len(groups),
        window_days,
    )

    canvas = canvas_factory()
    pages = layout_report(
        groups,
        canvas,
        generated_at=now.astimezone(tz),
        mode=mode,
        photo_loader=photo_loader,
        tz=tz,
    )
    data = canvas.render()
    logger.info("Report laid out on %d page(s), %d bytes", pages, len(data))
    return data


def export_report(
    window_days: int,
    *,
    entries: Optional[Iterable[DiaryEntry]] = None,
    base_dir: Path | None = None,
    **options,
) -> Path:
    """
    Build the report for ``window_days`` and save it as
    ``food-diary-<N>-days.pdf``. The file is only written once the whole
    document has been built.
    """
    if entries is None:
        entries = load_diary()
    try:
        data = build_report(entries, window_days, **options)
    except EmptyRangeError:
        logger.info("No entries in the last %d days; nothing saved", window_days)
        raise
    except Exception:
        logger.exception("Report export failed for %d-day window", window_days)
        raise
    return save_report(data, report_filename(window_days), base_dir=base_dir)
