"""Tests for the shoutbox command-line interface."""

import pytest
from click.testing import CliRunner

from shoutbox.cli import main, parse_pairs
from shoutbox.models import SendResult


@pytest.fixture
def runner(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for key in ("SHOUTBOX_API_KEY", "SHOUTBOX_API_ENDPOINT", "SHOUTBOX_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    return CliRunner()


@pytest.fixture
def sent(monkeypatch):
    calls = []

    async def fake_send(self, options):
        calls.append((self, options))
        return SendResult(ok=True, status=200, data={"id": "msg-1"})

    monkeypatch.setattr("shoutbox.cli.Shoutbox.send_email", fake_send)
    return calls


BASE_ARGS = ["send", "--from", "me@example.com", "--to", "a@example.com", "--subject", "Hi"]


class TestParsePairs:
    def test_parses(self):
        assert parse_pairs(("A=1", "B=x=y"), "--header") == {"A": "1", "B": "x=y"}

    def test_rejects_missing_separator(self):
        import click

        with pytest.raises(click.BadParameter):
            parse_pairs(("nope",), "--header")


class TestSend:
    def test_sends_via_http(self, runner, sent):
        result = runner.invoke(
            main,
            BASE_ARGS + ["--to", "b@example.com", "--html", "<b>Hi</b>", "--header", "X-A=1", "--tag", "kind=test"],
            env={"SHOUTBOX_API_KEY": "cli-key"},
        )

        assert result.exit_code == 0, result.output
        assert "Email sent" in result.output
        client, options = sent[0]
        assert client.endpoint == "https://api.shoutbox.net/send"
        assert options.to == ["a@example.com", "b@example.com"]
        assert options.headers == {"X-A": "1"}
        assert options.tags == {"kind": "test"}

    def test_missing_api_key(self, runner, sent):
        result = runner.invoke(main, BASE_ARGS + ["--text", "x"])

        assert result.exit_code == 1
        assert "API key is required" in result.output
        assert sent == []

    def test_rejection_exit_code(self, runner, monkeypatch):
        async def fake_send(self, options):
            return SendResult(ok=False, status=401, error="unauthorized")

        monkeypatch.setattr("shoutbox.cli.Shoutbox.send_email", fake_send)
        result = runner.invoke(main, BASE_ARGS, env={"SHOUTBOX_API_KEY": "k"})

        assert result.exit_code == 1
        assert "unauthorized" in result.output

    def test_template_and_attachment(self, runner, sent, tmp_path):
        template = tmp_path / "welcome.html"
        template.write_text("<p>Hi {{ user }}</p>")
        attachment = tmp_path / "notes.txt"
        attachment.write_text("notes")

        result = runner.invoke(
            main,
            BASE_ARGS + ["--template", str(template), "--var", "user=Ada", "--attach", str(attachment)],
            env={"SHOUTBOX_API_KEY": "k"},
        )

        assert result.exit_code == 0, result.output
        _, options = sent[0]
        assert options.template_content.name == "welcome.html"
        assert options.template_content.context == {"user": "Ada"}
        assert options.attachments[0].filepath == str(attachment)

    def test_config_file(self, runner, sent, tmp_path):
        config_file = tmp_path / "shoutbox.ini"
        config_file.write_text("[shoutbox]\napi_key = file-key\nendpoint = https://alt.example.com/send\n")

        result = runner.invoke(main, ["--config", str(config_file)] + BASE_ARGS)

        assert result.exit_code == 0, result.output
        client, _ = sent[0]
        assert client.endpoint == "https://alt.example.com/send"

    def test_smtp_flag(self, runner, monkeypatch):
        calls = []

        async def fake_send(self, options):
            calls.append(options)

        monkeypatch.setattr("shoutbox.cli.SMTPClient.send_email", fake_send)
        result = runner.invoke(main, BASE_ARGS + ["--smtp", "--text", "x"], env={"SHOUTBOX_API_KEY": "k"})

        assert result.exit_code == 0, result.output
        assert "submitted via mail.shoutbox.net" in result.output
        assert len(calls) == 1

    def test_transport_error(self, runner, monkeypatch):
        async def fake_send(self, options):
            raise ConnectionRefusedError("connection refused")

        monkeypatch.setattr("shoutbox.cli.Shoutbox.send_email", fake_send)
        result = runner.invoke(main, BASE_ARGS, env={"SHOUTBOX_API_KEY": "k"})

        assert result.exit_code == 1
        assert "connection refused" in result.output


class TestVerifySmtp:
    def test_verified(self, runner, monkeypatch):
        async def fake_verify(self):
            return True

        monkeypatch.setattr("shoutbox.cli.SMTPClient.verify_connection", fake_verify)
        result = runner.invoke(main, ["verify-smtp"], env={"SHOUTBOX_API_KEY": "k"})

        assert result.exit_code == 0
        assert "verified" in result.output

    def test_failed(self, runner, monkeypatch):
        async def fake_verify(self):
            return False

        monkeypatch.setattr("shoutbox.cli.SMTPClient.verify_connection", fake_verify)
        result = runner.invoke(main, ["verify-smtp"], env={"SHOUTBOX_API_KEY": "k"})

        assert result.exit_code == 1
        assert "Could not connect" in result.output
