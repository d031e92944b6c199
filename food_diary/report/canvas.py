from __future__ import annotations

import io
from typing import List, Protocol, Sequence, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from .text import wrap_text


FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"


class PageCanvas(Protocol):
    """
    Drawing surface used by the layout engine.

    Coordinates are millimetres measured from the top-left corner of the page.
    Text ``y`` is the baseline of the first line. Font sizes are in points.
    """

    page_width: float
    page_height: float

    def add_page(self) -> None: ...

    def text(
        self,
        lines: Sequence[str],
        x: float,
        y: float,
        *,
        bold: bool = False,
        size: float = 10,
        leading: float = 4,
    ) -> None: ...

    def image(self, data: bytes, x: float, y: float, w: float, h: float) -> None: ...

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None: ...

    def text_width(self, text: str, *, bold: bool = False, size: float = 10) -> float: ...

    def wrap(self, text: str, max_width: float, *, bold: bool = False, size: float = 10) -> List[str]: ...

    def render(self) -> bytes: ...


class ReportLabCanvas:
    """
    ``PageCanvas`` backed by a ReportLab canvas writing into memory.

    ReportLab measures in points from the bottom-left; this class converts from
    the engine's top-down millimetre space.
    """

    def __init__(self, page_size: Tuple[float, float] = LETTER) -> None:
        self._buffer = io.BytesIO()
        # invariant=1 drops the creation date and random document id so equal
        # input produces equal bytes.
        self._canv = canvas.Canvas(self._buffer, pagesize=page_size, invariant=1)
        self._pw, self._ph = page_size
        self.page_width = self._pw / mm
        self.page_height = self._ph / mm

    def _y(self, y: float) -> float:
        return self._ph - y * mm

    def add_page(self) -> None:
        self._canv.showPage()

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
        self._canv.setFont(FONT_BOLD if bold else FONT_REGULAR, size)
        self._canv.setFillColor(colors.black)
        yy = y
        for line in lines:
            self._canv.drawString(x * mm, self._y(yy), line)
            yy += leading

    def image(self, data: bytes, x: float, y: float, w: float, h: float) -> None:
        reader = ImageReader(io.BytesIO(data))
        self._canv.drawImage(reader, x * mm, self._y(y + h), w * mm, h * mm)

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self._canv.setStrokeColor(colors.Color(0.31, 0.31, 0.31))
        self._canv.setLineWidth(0.6)
        self._canv.line(x1 * mm, self._y(y1), x2 * mm, self._y(y2))

    def text_width(self, text: str, *, bold: bool = False, size: float = 10) -> float:
        return stringWidth(text, FONT_BOLD if bold else FONT_REGULAR, size) / mm

    def wrap(self, text: str, max_width: float, *, bold: bool = False, size: float = 10) -> List[str]:
        return wrap_text(text, max_width, lambda s: self.text_width(s, bold=bold, size=size))

    def render(self) -> bytes:
        self._canv.save()
        return self._buffer.getvalue()
