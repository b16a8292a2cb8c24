"""Integration tests for CLI commands.

Each test points the ``folio`` application at a fresh SQLite database via a
TOML config file and drives it through Typer's CliRunner.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from folio.main import app


@pytest.fixture
def cli_runner():
    """Create a Typer CLI runner."""
    return CliRunner()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Write a config file targeting a temporary SQLite database."""
    path = tmp_path / "folio.toml"
    path.write_text(
        f"""
[database]
url = "sqlite+aiosqlite:///{tmp_path / 'cli.db'}"

[logging]
level = "WARNING"
format = "console"
"""
    )
    return path


@pytest.fixture
def invoke(cli_runner, config_file):
    """Invoke the CLI with the test config, creating the schema first."""

    def _invoke(*args: str):
        return cli_runner.invoke(app, ["--config", str(config_file), *args])

    result = _invoke("init-db")
    assert result.exit_code == 0, result.output
    return _invoke


def _payload_file(tmp_path: Path, **overrides) -> Path:
    payload = {
        "slug": "harbour-studio",
        "title": "Harbour Studio",
        "category": "Workplace",
        "location": "Porto, Portugal",
        "year": "2023",
        "hero_caption": "",
        "excerpt": "A converted net loft on the quay.",
        "description": [
            "The studio occupies the upper floor of a nineteenth-century net loft overlooking the river.",
            "New oak joinery sits inside the original granite shell without touching its walls.",
        ],
        "meta": [
            {"label": "Location", "value": "Porto"},
            {"label": "Year", "value": "2023"},
            {"label": "Area", "value": "240 m2"},
        ],
        "services": ["Interior Design"],
        "collaborators": ["Rui Costa — Costa Engenharia"],
        "gallery": [],
    }
    payload.update(overrides)
    path = tmp_path / "payload.json"
    path.write_text(json.dumps(payload))
    return path


def _only_project_id(invoke) -> str:
    result = invoke("drafts", "list", "--format", "json")
    assert result.exit_code == 0, result.output
    projects = json.loads(result.stdout)
    assert len(projects) == 1
    return projects[0]["id"]


class TestDraftsCLI:
    """Integration tests for the drafts sub-commands."""

    def test_create_and_list(self, invoke):
        """Test that a created draft shows up in the JSON listing."""
        result = invoke("drafts", "create", "--actor", "editor@example.com")

        assert result.exit_code == 0, result.output
        assert "Draft Created" in result.stdout

        listed = json.loads(invoke("drafts", "list", "--format", "json").stdout)
        assert len(listed) == 1
        assert listed[0]["status"] == "draft"
        assert listed[0]["revision"] == 1

    def test_list_empty_table(self, invoke):
        """Test the table listing with no projects."""
        result = invoke("drafts", "list")

        assert result.exit_code == 0
        assert "No projects found" in result.stdout

    def test_save_from_payload_file(self, invoke, tmp_path):
        """Test saving a draft from a JSON payload file."""
        invoke("drafts", "create")
        project_id = _only_project_id(invoke)

        result = invoke("drafts", "save", project_id, str(_payload_file(tmp_path)))

        assert result.exit_code == 0, result.output
        assert "harbour-studio" in result.stdout
        shown = json.loads(invoke("drafts", "show", project_id).stdout)
        assert shown["title"] == "Harbour Studio"
        assert shown["revision"] == 2

    def test_publish_reports_every_violation(self, invoke, tmp_path):
        """Test that strict validation failures are listed and exit non-zero."""
        invoke("drafts", "create")
        project_id = _only_project_id(invoke)

        result = invoke("drafts", "publish", project_id, str(_payload_file(tmp_path)))

        assert result.exit_code == 1
        assert "Validation failed" in result.stdout
        assert "Hero image required" in result.stdout
        assert "Gallery requires at least three images" in result.stdout

    def test_invalid_payload_file(self, invoke, tmp_path):
        """Test that a malformed payload file is rejected before any write."""
        invoke("drafts", "create")
        project_id = _only_project_id(invoke)
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        result = invoke("drafts", "save", project_id, str(path))

        assert result.exit_code == 1
        assert "Invalid payload file" in result.stdout

    def test_show_unknown_project(self, invoke):
        """Test that an unknown ID exits with an error."""
        result = invoke("drafts", "show", "00000000-0000-0000-0000-000000000000")

        assert result.exit_code == 1
        assert "Error trying to load the draft" in result.stdout

    def test_duplicate_and_delete(self, invoke):
        """Test duplicating a draft and archiving the original."""
        invoke("drafts", "create")
        project_id = _only_project_id(invoke)

        duplicated = invoke("drafts", "duplicate", project_id)
        assert duplicated.exit_code == 0, duplicated.output
        assert "Draft Duplicated" in duplicated.stdout

        deleted = invoke("drafts", "delete", project_id, "--yes")
        assert deleted.exit_code == 0, deleted.output
        assert "Project Archived" in deleted.stdout

        remaining = json.loads(invoke("drafts", "list", "--format", "json").stdout)
        assert [p["id"] for p in remaining] != [project_id]
        assert len(remaining) == 1


class TestMediaCLI:
    """Integration tests for the media sub-commands."""

    def test_resolve_bucket_url(self, invoke):
        """Test that bucket URLs are rewritten to the media proxy."""
        result = invoke("media", "resolve", "https://pub-123.r2.dev/projects/a/hero.jpg")

        assert result.exit_code == 0
        assert result.stdout.strip() == "/api/media?key=projects%2Fa%2Fhero.jpg"

    def test_slot_rejects_unsupported_type(self, invoke):
        """Test that slot reports an unsupported content type."""
        result = invoke(
            "media", "slot", "00000000-0000-0000-0000-000000000000", "--type", "image/gif"
        )

        assert result.exit_code == 1
        assert "Unsupported content type" in result.stdout
