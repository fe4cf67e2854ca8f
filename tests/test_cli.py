"""Tests for the command line interface."""

import json

import pytest

from training_calendar import cli
from training_calendar.config import get_settings
from training_calendar.schema import from_json


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the session database at a temporary directory."""
    monkeypatch.setenv("TRAINING_CALENDAR_SESSION_DB_PATH", str(tmp_path / "session.db"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def plan_file(tmp_path, raw_document):
    path = tmp_path / "plan.json"
    path.write_text(json.dumps(raw_document), encoding="utf-8")
    return path


class TestValidateCommand:
    def test_valid_file(self, plan_file, capsys):
        assert cli.main(["validate", str(plan_file)]) == 0
        assert "valid" in capsys.readouterr().out

    def test_invalid_file(self, tmp_path, raw_document, capsys):
        raw_document["plan"]["weeks"][0]["days"]["Weds"] = []
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(raw_document), encoding="utf-8")

        assert cli.main(["validate", str(path)]) == 1
        assert "Weds" in capsys.readouterr().out

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{nope", encoding="utf-8")

        assert cli.main(["validate", str(path)]) == 1


class TestShowAndConvert:
    def test_show_file(self, plan_file, capsys):
        assert cli.main(["show", str(plan_file)]) == 0
        assert "Half Marathon" in capsys.readouterr().out

    def test_show_without_session(self):
        assert cli.main(["show"]) == 1

    def test_convert_to_miles(self, plan_file, tmp_path):
        output = tmp_path / "plan-mi.json"

        assert cli.main(["convert", str(plan_file), "--to", "miles", "-o", str(output)]) == 0

        document = from_json(output.read_bytes())
        assert document.settings.unit.value == "miles"
        assert document.plan.get_week(2).days["Sat"][0].distance == 7.5

    def test_convert_marks_generated_plan_edited(self, tmp_path, raw_document):
        raw_document["source"] = "generated"
        source = tmp_path / "generated.json"
        source.write_text(json.dumps(raw_document), encoding="utf-8")
        output = tmp_path / "converted.json"

        assert cli.main(["convert", str(source), "--to", "miles", "-o", str(output)]) == 0

        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["source"] == "edited"
        assert data["updatedAt"] != raw_document["updatedAt"]
        assert data["createdAt"] == raw_document["createdAt"]


class TestSessionCommands:
    """Import, export, status and reset against the persisted session."""

    def test_import_then_export(self, plan_file, tmp_path):
        output = tmp_path / "exported.json"

        assert cli.main(["import", str(plan_file)]) == 0
        assert cli.main(["export", "-o", str(output)]) == 0

        document = from_json(output.read_bytes())
        assert document.source.value == "imported"
        assert document.plan.total_weeks == 2

    def test_status(self, plan_file, capsys):
        cli.main(["import", str(plan_file)])
        capsys.readouterr()

        assert cli.main(["status"]) == 0
        assert "imported" in capsys.readouterr().out

    def test_reset(self, plan_file):
        cli.main(["import", str(plan_file)])

        assert cli.main(["reset"]) == 0
        assert cli.main(["export"]) == 1

    def test_rejected_import(self, tmp_path, raw_document, capsys):
        raw_document["version"] = "9.0.0"
        path = tmp_path / "future.json"
        path.write_text(json.dumps(raw_document), encoding="utf-8")

        assert cli.main(["import", str(path)]) == 1
        assert "Import rejected" in capsys.readouterr().out


def test_no_command_prints_help():
    assert cli.main([]) == 1
