from __future__ import annotations


class ReportError(Exception):
    """Base class for failures that abort a report export."""


class EmptyRangeError(ReportError):
    def __init__(self, window_days: int) -> None:
        super().__init__("No entries in that range")
        self.window_days = window_days


class ImageDecodeError(ReportError):
    pass


class CanvasOverflowError(ReportError):
    pass
