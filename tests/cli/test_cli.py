"""Smoke tests for the command line."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from skillstream.cli import app as cli


@pytest.fixture
def runner():
    return CliRunner()


class SentRequests(list):
    outcome: dict


@pytest.fixture
def sent(monkeypatch):
    """Capture chat requests instead of sending them."""
    captured = SentRequests()
    outcome = {"value": "completed"}

    async def fake_stream_chat(url, request, verbose):
        captured.append((url, request))
        return outcome["value"]

    monkeypatch.setattr(cli, "_stream_chat", fake_stream_chat)
    captured.outcome = outcome
    return captured


class TestChatCommand:
    def test_builds_request(self, runner, sent):
        result = runner.invoke(
            cli.app, ["chat", "what is 2+2?", "--tools", "--system", "be brief", "-u", "http://x"]
        )
        assert result.exit_code == 0
        url, request = sent[0]
        assert url == "http://x"
        assert request["enableTools"] is True
        assert request["messages"] == [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "what is 2+2?"},
        ]
        assert request["images"] == []

    def test_attachments(self, runner, sent, tmp_path):
        image = tmp_path / "cat.png"
        image.write_bytes(b"\x89PNG")
        notes = tmp_path / "notes.md"
        notes.write_text("# Notes")

        result = runner.invoke(cli.app, ["chat", "look", "-i", str(image), "-f", str(notes)])
        assert result.exit_code == 0
        _, request = sent[0]
        assert request["images"][0]["mimeType"] == "image/png"
        assert request["images"][0]["base64"] == "iVBORw=="
        assert request["files"][0]["name"] == "notes.md"
        assert request["files"][0]["content"] == "# Notes"

    def test_no_stream_uses_plain_request(self, runner, sent, monkeypatch):
        fetched = []

        async def fake_fetch_chat(url, request, verbose):
            fetched.append(request)
            return "completed"

        monkeypatch.setattr(cli, "_fetch_chat", fake_fetch_chat)
        result = runner.invoke(cli.app, ["chat", "hello", "--no-stream"])
        assert result.exit_code == 0
        assert len(fetched) == 1
        assert sent == []

    def test_failed_outcome_exits_nonzero(self, runner, sent):
        sent.outcome["value"] = "failed"
        result = runner.invoke(cli.app, ["chat", "hello"])
        assert result.exit_code == 1


class TestServeCommand:
    def test_flags_override_config(self, runner, monkeypatch, tmp_path):
        import uvicorn

        calls = []
        monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))
        monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-test")

        config_file = tmp_path / "config.yaml"
        config_file.write_text("port: 9100\nhost: 0.0.0.0\n")
        result = runner.invoke(
            cli.app, ["serve", "--config", str(config_file), "--port", "9200", "-l", "WARNING"]
        )

        assert result.exit_code == 0
        assert calls == [{"host": "0.0.0.0", "port": 9200, "log_level": "warning"}]


def test_tools_command(runner):
    result = runner.invoke(cli.app, ["tools"])
    assert result.exit_code == 0
    assert "calculate" in result.output
