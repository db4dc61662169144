"""Tests for stderr progress reporting."""

from repometa.progress import ProgressReporter, get_progress


class TestProgressReporter:

    def test_disabled_shows_only_errors(self, capsys):
        progress = ProgressReporter(enabled=False)
        progress("working")
        progress.warning("careful")
        progress.success("done")
        progress.error("broken")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == "ERROR: broken\n"

    def test_enabled(self, capsys):
        progress = ProgressReporter(enabled=True)
        progress("working")
        progress.warning("careful")
        progress.success("done")

        err = capsys.readouterr().err
        assert "working" in err
        assert "WARNING: careful" in err
        assert "done" in err


class TestGetProgress:

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("REPOMETA_PROGRESS", "1")
        assert get_progress().enabled is True
        monkeypatch.setenv("REPOMETA_PROGRESS", "0")
        assert get_progress().enabled is False

    def test_explicit_enable_wins(self, monkeypatch):
        monkeypatch.setenv("REPOMETA_PROGRESS", "0")
        assert get_progress(enabled=True).enabled is True
