from __future__ import annotations

from datetime import date, datetime

from ..config import DEFAULT_MEAL_NAME


WEEKDAYS_SHORT = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
MONTHS_SHORT = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def ordinal_suffix(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def format_time(moment: datetime) -> str:
    """12-hour clock, e.g. ``7:05 PM``."""
    hours = moment.hour % 12 or 12
    ampm = "PM" if moment.hour >= 12 else "AM"
    return f"{hours}:{moment.minute:02d} {ampm}"


def format_pretty(moment: datetime) -> str:
    """e.g. ``Sun Oct 18th 7:05 PM``."""
    weekday = WEEKDAYS_SHORT[moment.weekday()]
    month = MONTHS_SHORT[moment.month - 1]
    return f"{weekday} {month} {moment.day}{ordinal_suffix(moment.day)} {format_time(moment)}"


def format_day_short(day: date) -> str:
    return f"{WEEKDAYS_SHORT[day.weekday()]} {MONTHS_SHORT[day.month - 1]} {day.day}"


def entry_header(meal_name: str, moment: datetime) -> str:
    name = (meal_name or "").strip() or DEFAULT_MEAL_NAME
    return f"{name} @ {format_time(moment)}"
