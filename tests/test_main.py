from __future__ import annotations

import tempfile
from pathlib import Path

import pytest
from typer.testing import CliRunner

from food_diary import config, models
from food_diary.main import app


runner = CliRunner()
pytestmark = pytest.mark.usefixtures("restore_out_dir")


def test_add_list_and_export() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        out = ["--out", temp_dir]
        added = runner.invoke(app, out + ["add", "Lunch", "--dish", "Rice and beans", "--fullness-before", "3"])
        assert added.exit_code == 0, added.output
        assert "Saved #1: Lunch @" in added.output

        listed = runner.invoke(app, out + ["list"])
        assert listed.exit_code == 0
        assert "#1 " in listed.output
        assert "Lunch" in listed.output

        exported = runner.invoke(app, out + ["export", "--days", "7", "--mode", "inline"])
        assert exported.exit_code == 0, exported.output
        report = Path(temp_dir) / "food-diary-7-days.pdf"
        assert report.read_bytes().startswith(b"%PDF")
        assert "PDF saved" in exported.output


def test_export_with_no_entries_saves_nothing() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        result = runner.invoke(app, ["--out", temp_dir, "export", "--days", "7"])
        assert result.exit_code == 1
        assert "No entries in that range" in result.output
        assert not (Path(temp_dir) / "food-diary-7-days.pdf").exists()


def test_export_rejects_unsupported_window() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        result = runner.invoke(app, ["--out", temp_dir, "export", "--days", "5"])
        assert result.exit_code != 0


def test_duplicate_and_delete() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        out = ["--out", temp_dir]
        runner.invoke(app, out + ["add", "Dinner"])

        duplicated = runner.invoke(app, out + ["duplicate", "1"])
        assert duplicated.exit_code == 0
        assert "Entry duplicated as #2" in duplicated.output

        deleted = runner.invoke(app, out + ["delete", "1"])
        assert deleted.exit_code == 0
        missing = runner.invoke(app, out + ["delete", "1"])
        assert missing.exit_code == 1
        assert "Entry not found" in missing.output


def test_add_requires_meal_name() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        result = runner.invoke(app, ["--out", temp_dir, "add", "  "])
        assert result.exit_code == 1
        assert "Meal Name is required" in result.output


def test_out_option_does_not_outlive_the_test() -> None:
    default = config.BASE_DIR / "out"
    assert config.OUT_DIR == default

    with tempfile.TemporaryDirectory() as temp_dir:
        runner.invoke(app, ["--out", temp_dir, "list"])
        assert config.OUT_DIR == Path(temp_dir)
        assert str(models.engine.url).endswith(str(Path(temp_dir) / "diary.db"))
