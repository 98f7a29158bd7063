"""Tests for CLI commands using Click's testing utilities."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest
from click.testing import CliRunner

from ourjourney import __version__
from ourjourney.cli import ourjourney as cli

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def sheet_path(tmp_path: Path, sample_csv_bytes: bytes) -> Path:
    """A clean memories sheet on disk."""
    path = tmp_path / "memories.csv"
    path.write_bytes(sample_csv_bytes)
    return path


@pytest.fixture
def bad_sheet_path(tmp_path: Path, csv_factory: Callable[..., bytes]) -> Path:
    """A sheet whose second row has an unparseable latitude."""
    path = tmp_path / "bad.csv"
    path.write_bytes(
        csv_factory(
            [["1", "10", "20", "photo.jpg"], ["2", "north", "20", ""]],
            header=["id", "latitude", "longitude", "photo_files"],
        )
    )
    return path


# =============================================================================
# Version Tests
# =============================================================================


class TestVersion:
    """Tests for the top-level group."""

    def test_version_option(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "Our Journey" in result.output
        assert __version__ in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("parse", "validate", "upload", "current", "template"):
            assert command in result.output

    def test_custom_config(self, runner: CliRunner, tmp_path: Path, csv_factory) -> None:
        """--config changes parsing options."""
        config_path = tmp_path / "custom.yaml"
        config_path.write_text("parsing:\n  year_pivot: 30\n", encoding="utf-8")
        sheet = tmp_path / "dates.csv"
        sheet.write_bytes(csv_factory([["1", "01/02/40"]], header=["id", "date"]))

        result = runner.invoke(
            cli, ["--config", str(config_path), "parse", str(sheet), "--format", "json"]
        )

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["memories"][0]["date"] == "1940-02-01T00:00:00.000"


# =============================================================================
# Parse Command Tests
# =============================================================================


class TestParseCommand:
    """Tests for parse command."""

    def test_table_output(self, runner: CliRunner, sheet_path: Path) -> None:
        result = runner.invoke(cli, ["parse", str(sheet_path)])

        assert result.exit_code == 0
        assert "Parsed 2 memories" in result.output

    def test_json_output(self, runner: CliRunner, sheet_path: Path) -> None:
        result = runner.invoke(cli, ["parse", str(sheet_path), "--format", "json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["success"] is True
        assert payload["memories"][0]["photoFiles"] == ["photo1.jpg", "photo2.jpg"]
        assert payload["memories"][0]["date"] == "2024-01-15T00:00:00.000"

    def test_warning_hint(self, runner: CliRunner, bad_sheet_path: Path) -> None:
        result = runner.invoke(cli, ["parse", str(bad_sheet_path)])

        assert result.exit_code == 0
        assert "1 field warning(s)" in result.output

    def test_warning_table(self, runner: CliRunner, bad_sheet_path: Path) -> None:
        result = runner.invoke(cli, ["parse", str(bad_sheet_path), "--warnings"])

        assert result.exit_code == 0
        assert "Field Warnings" in result.output

    def test_unsupported_file(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "memories.pdf"
        path.write_bytes(b"%PDF-1.4")

        result = runner.invoke(cli, ["parse", str(path)])

        assert result.exit_code == 1
        assert "Unsupported file format" in result.output

    def test_missing_file(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["parse", str(tmp_path / "nope.csv")])
        assert result.exit_code == 1


# =============================================================================
# Validate Command Tests
# =============================================================================


class TestValidateCommand:
    """Tests for validate command."""

    def test_clean_sheet(self, runner: CliRunner, sheet_path: Path) -> None:
        result = runner.invoke(cli, ["validate", str(sheet_path), "--strict"])

        assert result.exit_code == 0
        assert "No field warnings" in result.output

    def test_problems_reported(self, runner: CliRunner, bad_sheet_path: Path) -> None:
        result = runner.invoke(cli, ["validate", str(bad_sheet_path)])

        assert result.exit_code == 0
        assert "1 problem(s) found" in result.output

    def test_strict_fails_on_problems(self, runner: CliRunner, bad_sheet_path: Path) -> None:
        result = runner.invoke(cli, ["validate", str(bad_sheet_path), "--strict"])
        assert result.exit_code == 1

    def test_missing_media(self, runner: CliRunner, sheet_path: Path, tmp_path: Path) -> None:
        media_dir = tmp_path / "media"
        media_dir.mkdir()
        for name in ("photo1.jpg", "photo2.jpg", "video1.mp4", "tram.jpg"):
            (media_dir / name).write_bytes(b"x")

        result = runner.invoke(
            cli, ["validate", str(sheet_path), "--media-dir", str(media_dir), "--strict"]
        )

        assert result.exit_code == 1
        assert "Missing Media" in result.output
        assert "fado.mp3" in result.output

    def test_all_media_present(self, runner: CliRunner, sheet_path: Path, tmp_path: Path) -> None:
        media_dir = tmp_path / "media"
        media_dir.mkdir()
        for name in ("photo1.jpg", "photo2.jpg", "video1.mp4", "tram.jpg", "fado.mp3"):
            (media_dir / name).write_bytes(b"x")

        result = runner.invoke(
            cli, ["validate", str(sheet_path), "--media-dir", str(media_dir), "--strict"]
        )

        assert result.exit_code == 0
        assert "All referenced media files are present" in result.output


# =============================================================================
# Upload Command Tests
# =============================================================================


class TestUploadCommand:
    """Tests for upload command."""

    def test_stores_sheet(self, runner: CliRunner, sheet_path: Path, upload_dir: Path) -> None:
        result = runner.invoke(cli, ["upload", str(sheet_path), "--upload-dir", str(upload_dir)])

        assert result.exit_code == 0
        assert "Stored 2 memories" in result.output
        assert (upload_dir / "memories.csv").read_bytes() == sheet_path.read_bytes()

    def test_uses_configured_directory(
        self, runner: CliRunner, sheet_path: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        target = tmp_path / "configured"
        monkeypatch.setenv("OURJOURNEY_PATHS__UPLOAD_DIR", str(target))

        result = runner.invoke(cli, ["upload", str(sheet_path)])

        assert result.exit_code == 0
        assert (target / "memories.csv").is_file()

    def test_corrupt_upload_keeps_previous_sheet(
        self, runner: CliRunner, sheet_path: Path, upload_dir: Path, tmp_path: Path
    ) -> None:
        runner.invoke(cli, ["upload", str(sheet_path), "--upload-dir", str(upload_dir)])
        broken = tmp_path / "broken.xlsx"
        broken.write_bytes(b"not a workbook")

        result = runner.invoke(cli, ["upload", str(broken), "--upload-dir", str(upload_dir)])

        assert result.exit_code == 1
        assert (upload_dir / "memories.csv").is_file()
        assert not (upload_dir / "memories.xlsx").exists()


# =============================================================================
# Current Command Tests
# =============================================================================


class TestCurrentCommand:
    """Tests for current command."""

    @pytest.fixture(autouse=True)
    def configured_upload_dir(self, upload_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
        monkeypatch.setenv("OURJOURNEY_PATHS__UPLOAD_DIR", str(upload_dir))
        return upload_dir

    def test_nothing_uploaded(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["current"])

        assert result.exit_code == 0
        assert "No memories sheet" in result.output

    def test_shows_stored_sheet(self, runner: CliRunner, sheet_path: Path) -> None:
        runner.invoke(cli, ["upload", str(sheet_path)])

        result = runner.invoke(cli, ["current"])

        assert result.exit_code == 0
        assert "2 memories in memories.csv" in result.output

    def test_json_output(
        self, runner: CliRunner, sheet_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("OURJOURNEY_CACHE__ENABLED", "false")
        runner.invoke(cli, ["upload", str(sheet_path)])

        result = runner.invoke(cli, ["current", "--format", "json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert [m["id"] for m in payload["memories"]] == ["1", "2"]

    def test_invalid_cache_setting(
        self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("OURJOURNEY_CACHE__MAX_ENTRIES", "0")

        result = runner.invoke(cli, ["current"])

        assert result.exit_code == 1


# =============================================================================
# Template Command Tests
# =============================================================================


class TestTemplateCommand:
    """Tests for template command."""

    def test_default_location(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["template"])

        assert result.exit_code == 0
        assert (tmp_path / "Our_Journey_Template.xlsx").is_file()

    def test_explicit_output(self, runner: CliRunner, tmp_path: Path) -> None:
        output = tmp_path / "blank.xlsx"

        result = runner.invoke(cli, ["template", str(output)])

        assert result.exit_code == 0
        assert output.is_file()
