from __future__ import annotations

from pathlib import Path
from typing import Tuple


BASE_DIR = Path(__file__).resolve().parents[1]
OUT_DIR = BASE_DIR / "out"
DB_PATH = OUT_DIR / "diary.db"

REPORT_TITLE = "Food Diary Export"
REPORT_NAME = "Food Diary"
DEFAULT_MEAL_NAME = "Meal"

# Choices offered for the export window, in days.
EXPORT_WINDOWS: Tuple[int, ...] = (1, 3, 7, 14, 30)

MAX_PHOTOS = 3
PHOTO_MAX_WIDTH_PX = 1200
PHOTO_JPEG_QUALITY = 72

# Letter pages come out about 935 px wide.
PREVIEW_DPI = 110
PREVIEW_PAGES = 3


def set_out_dir(path: Path) -> None:
    global OUT_DIR, DB_PATH
    OUT_DIR = path
    DB_PATH = OUT_DIR / "diary.db"
