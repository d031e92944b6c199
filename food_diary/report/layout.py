from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from ..config import REPORT_TITLE
from ..errors import CanvasOverflowError
from .canvas import PageCanvas
from .entries import DayGroup, DiaryEntry
from .formatting import entry_header, format_day_short, format_pretty
from .images import PhotoLoader, PreparedPhoto, prepare_photo, scale_to_fit


logger = logging.getLogger(__name__)

EPS = 1e-6


class ReportLayoutMode(str, Enum):
    # "Label: value" on one line, fullness as rows, taller photos that may
    # flow onto a new page.
    INLINE = "inline"
    # Label line above the wrapped value, fullness as a two-cell strip.
    STACKED = "stacked"


@dataclass(frozen=True)
class LayoutMetrics:
    """All distances in millimetres, font sizes in points."""

    margin: float = 8.0
    header_reserve: float = 10.0
    separator_reserve: float = 6.0
    separator_advance: float = 4.0

    title_size: float = 14
    title_advance: float = 7.0
    generated_size: float = 10
    generated_advance: float = 6.0
    rule_advance: float = 6.0

    day_size: float = 11
    day_advance: float = 5.0
    entry_indent: float = 6.0
    entry_size: float = 10
    entry_advance: float = 4.0
    entry_gap: float = 3.0

    left_col_w: float = 70.0
    gutter: float = 3.0
    label_size: float = 8
    value_size: float = 8
    label_h: float = 3.0
    line_h: float = 3.0
    label_pad: float = 1.5
    row_gap: float = 0.0

    fullness_h: float = 9.0

    photo_max_h: float = 35.0
    photo_gap: float = 2.0


METRICS: Dict[ReportLayoutMode, LayoutMetrics] = {
    ReportLayoutMode.STACKED: LayoutMetrics(),
    ReportLayoutMode.INLINE: LayoutMetrics(line_h=3.5, row_gap=1.0, photo_max_h=45.0),
}

TEXT_FIELDS: List[Tuple[str, str]] = [
    ("Dish & Components", "dish_components"),
    ("Place", "place"),
    ("ED Behaviors", "ed_behaviors"),
    ("Feelings or Emotions", "feelings"),
    ("Comments", "comments"),
]

FULLNESS_FIELDS: List[Tuple[str, str]] = [
    ("Fullness Before", "fullness_before"),
    ("Fullness After", "fullness_after"),
]


def text_rows(entry: DiaryEntry) -> List[Tuple[str, str]]:
    rows = []
    for label, attr in TEXT_FIELDS:
        value = str(getattr(entry, attr) or "").strip()
        if value:
            rows.append((label, value))
    return rows


def fullness_rows(entry: DiaryEntry) -> List[Tuple[str, str]]:
    # 0 and None both mean "not recorded".
    return [(label, str(getattr(entry, attr))) for label, attr in FULLNESS_FIELDS if getattr(entry, attr)]


def build_rows(entry: DiaryEntry, mode: ReportLayoutMode) -> List[Tuple[str, str]]:
    rows = text_rows(entry)
    if mode == ReportLayoutMode.INLINE:
        insert_at = 1 if rows and rows[0][0] == TEXT_FIELDS[0][0] else 0
        rows[insert_at:insert_at] = fullness_rows(entry)
    return rows


class PageWriter:
    """
    Owns the vertical cursor and the current page index for one report.

    Every draw call goes through here so nothing can land outside the
    printable area without raising ``CanvasOverflowError``.
    """

    def __init__(self, canvas: PageCanvas, metrics: LayoutMetrics) -> None:
        self.canvas = canvas
        self.metrics = metrics
        self.page = 0
        self.y = metrics.margin

    @property
    def top(self) -> float:
        return self.metrics.margin

    @property
    def bottom(self) -> float:
        return self.canvas.page_height - self.metrics.margin

    @property
    def left(self) -> float:
        return self.metrics.margin

    @property
    def right(self) -> float:
        return self.canvas.page_width - self.metrics.margin

    def fits(self, height: float) -> bool:
        return self.y + height <= self.bottom + EPS

    def new_page(self) -> None:
        self.canvas.add_page()
        self.page += 1
        self.y = self.top
        logger.debug("Page break -> page %d", self.page + 1)

    def _check(self, x0: float, y0: float, x1: float, y1: float, what: str) -> None:
        if x0 < self.left - EPS or x1 > self.right + EPS or y0 < 0 or y1 > self.bottom + EPS:
            raise CanvasOverflowError(
                f"{what} at ({x0:.1f}, {y0:.1f})-({x1:.1f}, {y1:.1f}) leaves the printable area "
                f"on page {self.page + 1}"
            )

    def text(
        self,
        lines: Sequence[str],
        x: float,
        y: float,
        *,
        bold: bool = False,
        size: float = 10,
        leading: float = 4,
    ) -> None:
        if not lines:
            return
        widest = max(self.canvas.text_width(line, bold=bold, size=size) for line in lines)
        self._check(x, y, x + widest, y + leading * (len(lines) - 1), "Text")
        self.canvas.text(lines, x, y, bold=bold, size=size, leading=leading)

    def image(self, data: bytes, x: float, y: float, w: float, h: float) -> None:
        self._check(x, y, x + w, y + h, "Image")
        self.canvas.image(data, x, y, w, h)

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self._check(min(x1, x2), min(y1, y2), max(x1, x2), max(y1, y2), "Line")
        self.canvas.line(x1, y1, x2, y2)


@dataclass
class _EntryContext:
    day_label: str
    header_lines: List[str]
    # Single-line header redrawn after a break inside the entry.
    repeat_lines: List[str]


class ReportLayout:
    """Lays out day groups onto a ``PageCanvas``."""

    def __init__(
        self,
        canvas: PageCanvas,
        mode: ReportLayoutMode = ReportLayoutMode.STACKED,
        photo_loader: PhotoLoader = prepare_photo,
        tz: Optional[tzinfo] = None,
        metrics: Optional[LayoutMetrics] = None,
    ) -> None:
        self.canvas = canvas
        self.mode = mode
        self.photo_loader = photo_loader
        self.tz = tz
        self.metrics = metrics or METRICS[mode]
        self.writer = PageWriter(canvas, self.metrics)
        # Page on which the current day header was last drawn.
        self._day_page = -1

    @property
    def entry_x(self) -> float:
        return self.metrics.margin + self.metrics.entry_indent

    @property
    def photo_x(self) -> float:
        return self.entry_x + self.metrics.left_col_w + self.metrics.gutter

    # --- headers -------------------------------------------------------

    def _document_header(self, generated_at: datetime) -> None:
        w, m = self.writer, self.metrics
        w.text([REPORT_TITLE], w.left, w.y, bold=True, size=m.title_size)
        w.y += m.title_advance
        w.text([f"Generated: {format_pretty(generated_at)}"], w.left, w.y, size=m.generated_size)
        w.y += m.generated_advance
        w.line(w.left, w.y, w.right, w.y)
        w.y += m.rule_advance

    def _day_header(self, label: str) -> None:
        w, m = self.writer, self.metrics
        w.text([label], w.left, w.y, bold=True, size=m.day_size)
        w.y += m.day_advance
        self._day_page = w.page

    def _entry_header(self, ctx: _EntryContext, lines: List[str]) -> None:
        """Draw a wrapped entry header, continuing it under the day header on later pages."""
        w, m = self.writer, self.metrics
        fresh = False
        while lines:
            fit = max(0, int(math.floor((w.bottom - w.y) / m.entry_advance + EPS)))
            if fit < 1:
                if fresh:
                    raise CanvasOverflowError(f"No room for the entry header on page {w.page + 1}")
                w.new_page()
                self._day_header(ctx.day_label)
                fresh = True
                continue
            chunk, lines = lines[:fit], lines[fit:]
            w.text(chunk, self.entry_x, w.y, bold=True, size=m.entry_size, leading=m.entry_advance)
            w.y += m.entry_advance * len(chunk)
            fresh = False

    def _repeat_header(self, lines: List[str], local: datetime) -> List[str]:
        if len(lines) <= 1:
            return lines
        m = self.metrics
        width = self.writer.right - self.entry_x
        # Shorten the meal name until name and time share one line.
        name = lines[0].rstrip()
        while name:
            candidate = entry_header(f"{name}...", local)
            if self.canvas.text_width(candidate, bold=True, size=m.entry_size) <= width + EPS:
                return [candidate]
            name = name[:-1].rstrip()
        return [entry_header("...", local)]

    def _break_with_headers(self, ctx: _EntryContext) -> None:
        self.writer.new_page()
        self._day_header(ctx.day_label)
        self._entry_header(ctx, ctx.repeat_lines)

    # --- photo column --------------------------------------------------

    def _photo_sizes(self, photos: List[PreparedPhoto], max_h: float) -> List[Tuple[float, float]]:
        m = self.metrics
        col_w = self.writer.right - self.photo_x
        available = col_w - (len(photos) - 1) * m.photo_gap
        per_photo = available / len(photos)
        return [scale_to_fit(p.width, p.height, per_photo, max_h) for p in photos]

    def _photos(self, entry: DiaryEntry, ctx: _EntryContext) -> Optional[Tuple[int, float]]:
        """
        Place the entry's photos in a row starting at the column top.

        When the tallest photo does not fit below the entry header, the row
        moves to a new page under redrawn day and entry headers and the text
        column follows it there. Returns ``(page, bottom)`` of the row, or
        ``None`` when the entry has no photos.
        """
        if not entry.photos:
            return None
        w, m = self.writer, self.metrics
        prepared = [self.photo_loader(photo) for photo in entry.photos]
        sizes = self._photo_sizes(prepared, m.photo_max_h)

        if not w.fits(max(h for _, h in sizes)):
            self._break_with_headers(ctx)
            room = w.bottom - w.y
            if max(h for _, h in sizes) > room:
                # Page too short for full-height photos even below fresh headers.
                sizes = self._photo_sizes(prepared, room)

        x = self.photo_x
        y = w.y
        bottom = y
        for photo, (iw, ih) in zip(prepared, sizes):
            w.image(photo.data, x, y, iw, ih)
            x += iw + m.photo_gap
            bottom = max(bottom, y + ih)
        return w.page, bottom

    # --- text column ---------------------------------------------------

    def _lines_that_fit(self, label_h: float, line_h: float) -> int:
        room = self.writer.bottom - self.writer.y - label_h
        return max(0, int(math.floor(room / line_h + EPS)))

    def _row_break(self, ctx: _EntryContext, label: str, fresh: bool) -> bool:
        if fresh:
            raise CanvasOverflowError(
                f"No room for a line of {label} below the headers on page {self.writer.page + 1}"
            )
        self._break_with_headers(ctx)
        return True

    def _stacked_row(self, ctx: _EntryContext, label: str, value: str) -> None:
        w, m = self.writer, self.metrics
        lines = self.canvas.wrap(value, m.left_col_w, size=m.value_size)
        heading = f"{label}:"
        fresh = False
        while lines:
            fit = self._lines_that_fit(m.label_h, m.line_h)
            if fit < 1:
                fresh = self._row_break(ctx, label, fresh)
                continue
            chunk, lines = lines[:fit], lines[fit:]
            w.text([heading], self.entry_x, w.y, bold=True, size=m.label_size)
            w.text(chunk, self.entry_x, w.y + m.label_h, size=m.value_size, leading=m.line_h)
            w.y += m.label_h + len(chunk) * m.line_h + m.row_gap
            if lines:
                fresh = self._row_break(ctx, label, False)
                heading = f"{label} (cont.):"

    def _inline_row(self, ctx: _EntryContext, label: str, value: str) -> None:
        w, m = self.writer, self.metrics
        heading = f"{label}:"
        label_w = self.canvas.text_width(heading, bold=True, size=m.label_size) + m.label_pad
        lines = self.canvas.wrap(value, m.left_col_w - label_w, size=m.value_size)
        fresh = False
        while lines:
            fit = self._lines_that_fit(0.0, m.line_h)
            if fit < 1:
                fresh = self._row_break(ctx, label, fresh)
                continue
            chunk, lines = lines[:fit], lines[fit:]
            w.text([heading], self.entry_x, w.y, bold=True, size=m.label_size)
            w.text(chunk, self.entry_x + label_w, w.y, size=m.value_size, leading=m.line_h)
            w.y += len(chunk) * m.line_h + m.row_gap
            if lines:
                fresh = self._row_break(ctx, label, False)

    def _fullness_strip(self, ctx: _EntryContext, entry: DiaryEntry) -> None:
        rows = fullness_rows(entry)
        if not rows:
            return
        w, m = self.writer, self.metrics
        if not w.fits(m.fullness_h):
            self._break_with_headers(ctx)
        cell_w = m.left_col_w / 2
        x = self.entry_x
        for label, value in rows:
            w.text([f"{label}:"], x, w.y, bold=True, size=m.label_size)
            w.text([value], x, w.y + m.line_h, size=m.value_size)
            x += cell_w
        w.y += m.fullness_h

    # --- entries and days ----------------------------------------------

    def _entry(self, day_label: str, entry: DiaryEntry, more_follows: bool) -> None:
        w, m = self.writer, self.metrics
        local = entry.captured_at.astimezone(self.tz)
        header_lines = self.canvas.wrap(
            entry_header(entry.meal_name, local), w.right - self.entry_x, bold=True, size=m.entry_size
        )
        ctx = _EntryContext(
            day_label=day_label,
            header_lines=header_lines,
            repeat_lines=self._repeat_header(header_lines, local),
        )

        footprint = m.entry_advance * len(ctx.header_lines)
        if footprint > w.bottom - w.top - m.day_advance:
            # Taller than a whole page; start here and let it run on.
            footprint = m.entry_advance
        if not w.fits(max(m.header_reserve, footprint)):
            w.new_page()
        if self._day_page != w.page:
            self._day_header(day_label)
        self._entry_header(ctx, ctx.header_lines)

        photo_end = self._photos(entry, ctx)

        for label, value in build_rows(entry, self.mode):
            if self.mode == ReportLayoutMode.INLINE:
                self._inline_row(ctx, label, value)
            else:
                self._stacked_row(ctx, label, value)
        if self.mode == ReportLayoutMode.STACKED:
            self._fullness_strip(ctx, entry)

        reached = w.y
        if photo_end is not None and photo_end[0] == w.page:
            reached = max(reached, photo_end[1])
        w.y = reached + m.entry_gap
        if more_follows and not w.fits(m.header_reserve):
            w.new_page()

    def _day(self, group: DayGroup, is_last: bool) -> None:
        w, m = self.writer, self.metrics
        label = format_day_short(group.day)
        if not w.fits(m.header_reserve):
            w.new_page()
        self._day_header(label)

        for index, entry in enumerate(group.entries):
            more_follows = not is_last or index < len(group.entries) - 1
            self._entry(label, entry, more_follows)

        if not is_last:
            if not w.fits(m.separator_reserve):
                w.new_page()
            w.line(w.left, w.y, w.right, w.y)
            w.y += m.separator_advance

    def run(self, groups: Sequence[DayGroup], generated_at: datetime) -> int:
        """Draw the whole report and return the number of pages used."""
        self._document_header(generated_at)
        for index, group in enumerate(groups):
            self._day(group, is_last=index == len(groups) - 1)
        return self.writer.page + 1


def layout_report(
    groups: Sequence[DayGroup],
    canvas: PageCanvas,
    *,
    generated_at: datetime,
    mode: ReportLayoutMode = ReportLayoutMode.STACKED,
    photo_loader: PhotoLoader = prepare_photo,
    tz: Optional[tzinfo] = None,
) -> int:
    return ReportLayout(canvas, mode=mode, photo_loader=photo_loader, tz=tz).run(groups, generated_at)
