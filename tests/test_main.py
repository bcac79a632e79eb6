"""Tests for main.py — the command-line agenda."""

import pytest

import main
from src.config import settings


@pytest.fixture
def db_settings(tmp_db_path, monkeypatch):
    monkeypatch.setattr(settings, "DATABASE_PATH", tmp_db_path)
    return tmp_db_path


class TestMain:
    def test_prints_agenda_and_seeds(self, db_settings, capsys):
        assert main.main(["--date", "2026-03-02"]) == 0
        out = capsys.readouterr().out
        assert "Monday 02 March 2026" in out
        assert "Morning - Me" in out
        assert "Weekly Reset" not in out

    def test_sunday_shows_weekly_reset(self, db_settings, capsys):
        main.main(["--date", "2026-03-08"])
        assert "Weekly Reset" in capsys.readouterr().out

    def test_invalid_date(self, db_settings, capsys):
        assert main.main(["--date", "tomorrow"]) == 2
        assert "ERROR" in capsys.readouterr().err
