from __future__ import annotations

import logging
import mimetypes
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer

from . import config
from .diary import add_entry, delete_entry, duplicate_entry, list_entries
from .errors import EmptyRangeError, ReportError
from .models import reset_engine
from .report.build import export_report
from .report.entries import DiaryEntry, PhotoRecord, SortOrder
from .report.formatting import entry_header, format_pretty
from .report.layout import ReportLayoutMode
from .report.preview import render_previews

app = typer.Typer(help="Personal food diary with printable PDF export")
logger = logging.getLogger(__name__)


@app.callback()
def main(
    out: Optional[Path] = typer.Option(None, "--out", help="Data and output directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if out:
        config.set_out_dir(out)
        reset_engine()


def _read_photo(path: Path) -> PhotoRecord:
    if not path.exists():
        raise typer.BadParameter(f"Photo not found: {path}")
    mime_type, _ = mimetypes.guess_type(path.name)
    return PhotoRecord(data=path.read_bytes(), mime_type=mime_type or "image/jpeg")


@app.command()
def add(
    meal_name: str = typer.Argument(..., help="Meal name"),
    at: Optional[datetime] = typer.Option(None, "--at", help="Capture time (local), defaults to now"),
    dish: str = typer.Option("", "--dish", help="Dish & components"),
    place: str = typer.Option("", "--place"),
    ed_behaviors: str = typer.Option("", "--ed-behaviors"),
    feelings: str = typer.Option("", "--feelings", help="Feelings or emotions"),
    comments: str = typer.Option("", "--comments"),
    fullness_before: Optional[int] = typer.Option(None, "--fullness-before", min=0, max=10),
    fullness_after: Optional[int] = typer.Option(None, "--fullness-after", min=0, max=10),
    photo: List[Path] = typer.Option([], "--photo", help=f"Photo file, up to {config.MAX_PHOTOS}"),
) -> None:
    captured_at = (at or datetime.now()).astimezone()
    entry = DiaryEntry(
        captured_at=captured_at,
        meal_name=meal_name,
        dish_components=dish,
        place=place,
        ed_behaviors=ed_behaviors,
        feelings=feelings,
        comments=comments,
        fullness_before=fullness_before,
        fullness_after=fullness_after,
        photos=tuple(_read_photo(path) for path in photo),
    )
    try:
        saved = add_entry(entry)
    except ValueError as exc:
        typer.echo(str(exc))
        raise typer.Exit(code=1)
    typer.echo(f"Saved #{saved.id}: {entry_header(saved.meal_name, saved.captured_at.astimezone())}")


@app.command("list")
def list_command() -> None:
    entries = list_entries()
    if not entries:
        typer.echo("No entries")
        return
    for entry in entries:
        local = entry.captured_at.astimezone()
        photos = f" [{len(entry.photos)} photo(s)]" if entry.photos else ""
        typer.echo(f"#{entry.id} {format_pretty(local)}  {entry.meal_name}{photos}")


@app.command()
def delete(entry_id: int = typer.Argument(...)) -> None:
    try:
        delete_entry(entry_id)
    except LookupError as exc:
        typer.echo(str(exc))
        raise typer.Exit(code=1)
    typer.echo("Entry deleted")


@app.command()
def duplicate(entry_id: int = typer.Argument(...)) -> None:
    try:
        copy = duplicate_entry(entry_id)
    except LookupError as exc:
        typer.echo(str(exc))
        raise typer.Exit(code=1)
    typer.echo(f"Entry duplicated as #{copy.id}")


@app.command()
def export(
    days: int = typer.Option(7, "--days", help="Window in days: 1, 3, 7, 14 or 30"),
    mode: ReportLayoutMode = typer.Option(ReportLayoutMode.STACKED, "--mode", case_sensitive=False),
    order: SortOrder = typer.Option(SortOrder.NEWEST_FIRST, "--order", case_sensitive=False),
    preview: bool = typer.Option(False, "--preview", help="Also write PNG previews"),
) -> None:
    if days not in config.EXPORT_WINDOWS:
        choices = ", ".join(str(d) for d in config.EXPORT_WINDOWS)
        raise typer.BadParameter(f"--days must be one of {choices}")
    typer.echo("Building PDF")
    try:
        path = export_report(days, mode=mode, order=order)
    except EmptyRangeError as exc:
        typer.echo(str(exc))
        raise typer.Exit(code=1)
    except ReportError as exc:
        logger.debug("Export failed", exc_info=True)
        typer.echo(f"Could not export PDF: {exc}")
        raise typer.Exit(code=1)
    typer.echo(f"PDF saved: {path}")
    if preview:
        for preview_file in render_previews(path):
            typer.echo(f"Preview: {preview_file}")


if __name__ == "__main__":
    app()
