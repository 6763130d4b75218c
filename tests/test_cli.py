"""
Tests for the content correction CLI.
"""

import json
import logging

import pytest

from content_fix.cli.correct import main
from content_fix.llm.mock_provider import MockProvider


@pytest.fixture(autouse=True)
def restore_root_logging():
    """The CLI reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def input_file(tmp_path, sample_content):
    path = tmp_path / "input.json"
    path.write_text(
        json.dumps(
            {
                "content": sample_content.to_dict(),
                "issues": [
                    {"type": "title_too_long", "current_value": 70, "target_value": 60, "severity": "major"},
                    {"type": "not_a_real_issue", "current_value": 1, "target_value": 0},
                ],
                "focus_keyword": "seo tips",
            }
        ),
        encoding="utf-8",
    )
    return path


class TestRunCommand:
    """Tests for `run`."""

    def test_successful_correction(self, input_file, sample_content, monkeypatch, capsys):
        answer = json.dumps({"title": "SEO Tips for Beginners"})
        monkeypatch.setattr("content_fix.llm.get_llm_provider", lambda name: MockProvider([answer], name=name))

        exit_code = main(["run", str(input_file), "--provider", "scripted"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert output["success"] is True
        assert output["content"]["title"] == "SEO Tips for Beginners"
        assert output["content"]["content"] == sample_content.body
        assert len(output["prompts"]) == 1

    def test_failed_correction_exit_code(self, input_file, monkeypatch, capsys):
        monkeypatch.setenv("CORRECTION_RETRY_DELAY_SECONDS", "0")

        exit_code = main(["run", str(input_file), "--provider", "mock"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 1
        assert output["success"] is False
        assert output["corrections_applied"] == 0
        assert output["failed_corrections"][0]["issue_type"] == "title_too_long"

    def test_missing_input(self, tmp_path, capsys):
        exit_code = main(["run", str(tmp_path / "missing.json")])
        assert exit_code == 2
        assert "could not read input" in capsys.readouterr().err

    def test_invalid_json(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        assert main(["run", str(path)]) == 2

    def test_unknown_provider(self, input_file, capsys):
        assert main(["run", str(input_file), "--provider", "nonesuch"]) == 2
        assert "Unknown LLM provider" in capsys.readouterr().err


class TestProvidersCommand:
    """Tests for `providers`."""

    def test_lists_chain(self, monkeypatch, capsys):
        monkeypatch.setenv("DEFAULT_PROVIDER", "mock")
        monkeypatch.setenv("BACKUP_PROVIDERS", "")

        assert main(["providers"]) == 0
        out = capsys.readouterr().out
        assert "1. mock (mock-model)" in out

    def test_no_usable_providers(self, monkeypatch, capsys):
        monkeypatch.setenv("DEFAULT_PROVIDER", "mock")
        monkeypatch.setenv("DISABLED_PROVIDERS", "mock")

        assert main(["providers"]) == 1
        assert "No usable providers" in capsys.readouterr().out


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out.lower()
