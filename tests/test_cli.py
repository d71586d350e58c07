"""Tests for the command-line entry point."""

import pytest

from manifestdoc.cli import main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ["SOURCES", "OUTPUT", "TITLE", "STRICT", "LOG_LEVEL"]:
        monkeypatch.delenv(f"MANIFESTDOC_{name}", raising=False)


class TestMain:
    """Exit status and where the document goes."""

    def test_writes_markdown_to_stdout(self, module_dir, capsys):
        """Markdown goes to stdout; logging stays on stderr."""
        assert main([str(module_dir)]) == 0
        out = capsys.readouterr().out
        assert out.startswith("# Reference\n")
        assert "### func4x" in out

    def test_writes_to_output_file(self, module_dir, tmp_path, monkeypatch, capsys):
        target = tmp_path / "REFERENCE.md"
        monkeypatch.setenv("MANIFESTDOC_OUTPUT", str(target))
        monkeypatch.setenv("MANIFESTDOC_TITLE", "Sample module")
        assert main([str(module_dir)]) == 0
        assert target.read_text().startswith("# Sample module\n")
        assert capsys.readouterr().out == ""

    def test_sources_from_environment(self, module_dir, monkeypatch, capsys):
        monkeypatch.setenv("MANIFESTDOC_SOURCES", str(module_dir))
        assert main([]) == 0
        assert "### klass" in capsys.readouterr().out

    def test_no_sources(self, capsys):
        assert main([]) == 1
        assert capsys.readouterr().out == ""

    def test_invalid_settings(self, monkeypatch, capsys):
        monkeypatch.setenv("MANIFESTDOC_LOG_LEVEL", "chatty")
        assert main(["."]) == 1
        assert "invalid settings" in capsys.readouterr().err

    def test_duplicate_names_fail(self, tmp_path, capsys):
        (tmp_path / "a.pp").write_text("# A.\nclass x {\n}\n")
        (tmp_path / "b.pp").write_text("# B.\nclass x {\n}\n")
        assert main([str(tmp_path)]) == 1
        assert capsys.readouterr().out == ""

    def test_strict_failure(self, tmp_path, monkeypatch, capsys):
        (tmp_path / "init.pp").write_text("class bare {\n}\n")
        monkeypatch.setenv("MANIFESTDOC_STRICT", "1")
        assert main([str(tmp_path)]) == 1
        assert capsys.readouterr().out == ""
