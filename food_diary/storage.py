from __future__ import annotations

from pathlib import Path

from slugify import slugify

from . import config


REPORT_EXTENSION = "pdf"


def output_dir(base_dir: Path | None = None) -> Path:
    root = base_dir or config.OUT_DIR
    root.mkdir(parents=True, exist_ok=True)
    return root


def report_filename(window_days: int) -> str:
    stem = slugify(f"{config.REPORT_NAME} {window_days} days")
    return f"{stem}.{REPORT_EXTENSION}"


def preview_path(report_path: Path, index: int) -> Path:
    return report_path.with_name(f"{report_path.stem}-preview-{index}.png")


def save_report(data: bytes, filename: str, base_dir: Path | None = None) -> Path:
    """
    Write ``data`` next to a temporary name and move it into place, so a
    reader never sees a half-written report.
    """
    if "/" in filename or "\\" in filename or ".." in filename:
        raise ValueError(f"Invalid report filename: {filename}")
    target = output_dir(base_dir) / filename
    temp = target.with_name(f"{target.name}.tmp")
    try:
        temp.write_bytes(data)
        temp.replace(target)
    finally:
        temp.unlink(missing_ok=True)
    return target
