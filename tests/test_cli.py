"""
Tests for the command-line interface.
"""

from typer.testing import CliRunner

from tagstrings import __version__
from tagstrings.cli import app

runner = CliRunner()


class TestCli:
    """Commands run through typer's test runner."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_sync_without_translation(self, sample_project):
        result = runner.invoke(app, ["sync", str(sample_project), "--no-translate", "--add-language", "de"])
        assert result.exit_code == 0, result.output
        assert "Summary: files updated: 1" in result.output
        assert (sample_project / "i18n" / "de.py").exists()

    def test_sync_twice(self, sample_project):
        args = ["sync", str(sample_project), "--no-translate", "--document", "-l", "de"]
        runner.invoke(app, args)
        result = runner.invoke(app, ["sync", str(sample_project), "--no-translate", "--document"])
        assert result.exit_code == 0, result.output
        assert "Summary: files updated: 0" in result.output

    def test_sync_with_dummy_backend(self, sample_project):
        result = runner.invoke(app, ["sync", str(sample_project), "--backend", "dummy", "-l", "fr"])
        assert result.exit_code == 0, result.output
        assert "[fr] Hello" in (sample_project / "i18n" / "fr.py").read_text(encoding="utf-8")

    def test_sync_custom_output(self, sample_project, tmp_path):
        output = tmp_path / "catalogs"
        result = runner.invoke(
            app, ["sync", str(sample_project), "--no-translate", "--output", str(output), "-l", "de"]
        )
        assert result.exit_code == 0, result.output
        assert (output / "de.py").exists()

    def test_sync_missing_project(self, tmp_path):
        result = runner.invoke(app, ["sync", str(tmp_path / "missing"), "--no-translate"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_sync_missing_key(self, sample_project, monkeypatch, tmp_path):
        monkeypatch.delenv("TRANSLATOR_KEY", raising=False)
        monkeypatch.delenv("translator_key", raising=False)
        monkeypatch.setattr("tagstrings.keys.KEYS_FILE", tmp_path / "keys.json")
        result = runner.invoke(app, ["sync", str(sample_project), "--backend", "azure"])
        assert result.exit_code == 1
        assert "Missing API key" in result.output

    def test_scan(self, sample_project):
        result = runner.invoke(app, ["scan", str(sample_project)])
        assert result.exit_code == 0, result.output
        assert "Hello" in result.output
        assert "2 strings in 3 files" in result.output

    def test_languages_dummy(self):
        result = runner.invoke(app, ["languages", "--backend", "dummy"])
        assert result.exit_code == 0, result.output
        assert "German" in result.output

    def test_key_status_from_environment(self, monkeypatch):
        monkeypatch.setenv("TRANSLATOR_KEY", "abcd1234efgh5678")
        result = runner.invoke(app, ["key", "status"])
        assert result.exit_code == 0
        assert "Source: env" in result.output
        assert "abcd...5678" in result.output

    def test_key_set_stores_in_keychain(self, memory_keyring):
        result = runner.invoke(app, ["key", "set", "abcd1234efgh5678"])
        assert result.exit_code == 0, result.output
        assert "OS keychain" in result.output
        assert memory_keyring.passwords[("tagstrings", "azure")] == "abcd1234efgh5678"

    def test_key_unknown_action(self):
        result = runner.invoke(app, ["key", "rotate"])
        assert result.exit_code == 1
