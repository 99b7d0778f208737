"""
Tests for the epp command-line interface.
"""

import functools
import json
import sys

import pytest
import yaml
from click.testing import CliRunner
from lxml import etree

from epp_cli import config as cli_config
from epp_cli import main as cli_main
from epp_session import EPPClient
from epp_session.exceptions import EPPLoginError

from conftest import DOMAIN_NS, EPP_NS

BASE_ARGS = ["--host", "epp.registry.example", "--tag", "registrar1", "--password", "secret"]


@pytest.fixture
def runner(registry, monkeypatch):
    """CLI runner whose clients talk to the fake registry."""
    monkeypatch.setattr(cli_config, "DEFAULT_CONFIG_PATHS", [])
    monkeypatch.delenv("EPP_PASSWORD", raising=False)
    monkeypatch.setattr(
        cli_main, "EPPClient", functools.partial(EPPClient, transport_factory=registry)
    )
    return CliRunner()


def sent_command(data: bytes) -> etree._Element:
    return etree.fromstring(data).find(f"{{{EPP_NS}}}command")


class TestSessionCommands:
    """Tests for hello and connection settings."""

    def test_hello(self, runner, registry):
        """hello prints the greeting."""
        result = runner.invoke(cli_main.cli, BASE_ARGS + ["hello"])

        assert result.exit_code == 0, result.output
        assert "Example EPP server epp.registry.example" in result.stdout
        assert registry.sent_verbs() == ["hello"]

    def test_missing_host(self, runner):
        """Commands need a host."""
        result = runner.invoke(cli_main.cli, ["--tag", "registrar1", "--password", "x", "hello"])

        assert result.exit_code == 1
        assert "No server host specified" in result.output

    def test_password_from_environment(self, runner, registry, monkeypatch):
        """EPP_PASSWORD is used when no password is given."""
        monkeypatch.setenv("EPP_PASSWORD", "from-env")

        result = runner.invoke(
            cli_main.cli,
            ["--host", "epp.registry.example", "--tag", "registrar1", "check", "domain", "example.test"],
        )

        assert result.exit_code == 0, result.output
        login = sent_command(registry.sent[0]).find(f"{{{EPP_NS}}}login")
        assert login.findtext(f"{{{EPP_NS}}}pw") == "from-env"

    def test_config_file(self, runner, registry, tmp_path):
        """Settings are read from the config file and profile."""
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({
            "profiles": {
                "ote": {
                    "server": {"host": "epp-ote.registry.example", "compatibility": True},
                    "credentials": {"tag": "ote_registrar", "password": "ote-secret"},
                },
            },
        }))

        result = runner.invoke(
            cli_main.cli, ["-c", str(path), "-p", "ote", "check", "host", "ns1.example.test"]
        )

        assert result.exit_code == 0, result.output
        transport = registry.transports[0]
        assert transport.config.host == "epp-ote.registry.example"
        assert transport.config.compatibility
        assert bytes(transport.wire).startswith(b"<?xml")


class TestObjectCommands:
    """Tests for object commands."""

    def test_check_json(self, runner, registry):
        """check prints every result."""
        registry.reply("check", res_data=(
            f'<domain:chkData xmlns:domain="{DOMAIN_NS}">'
            '<domain:cd><domain:name avail="1">example.test</domain:name></domain:cd>'
            '<domain:cd><domain:name avail="0">example.net</domain:name></domain:cd>'
            "</domain:chkData>"
        ))

        result = runner.invoke(
            cli_main.cli, BASE_ARGS + ["--format", "json", "check", "domain", "example.test", "example.net"]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["code"] == 1000
        assert [(r["name"], r["available"]) for r in data["results"]] == [
            ("example.test", True),
            ("example.net", False),
        ]

    def test_info_xml(self, runner, registry):
        """--format xml prints the server reply."""
        result = runner.invoke(cli_main.cli, BASE_ARGS + ["--format", "xml", "info", "host", "ns1.example.test"])

        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == registry.last_reply("info").decode("utf-8")

    def test_info_auth_info(self, runner, registry):
        """--auth-info is sent with contact info."""
        result = runner.invoke(cli_main.cli, BASE_ARGS + ["info", "contact", "sh8013", "-a", "2fooBAR"])

        assert result.exit_code == 0, result.output
        command = sent_command(registry.sent[1])
        assert command.findtext(".//{urn:ietf:params:xml:ns:contact-1.0}pw") == "2fooBAR"

    def test_unknown_type(self, runner, registry):
        """Unknown object types are rejected by the argument parser."""
        result = runner.invoke(cli_main.cli, BASE_ARGS + ["check", "widget", "x"])

        assert result.exit_code == 2
        assert registry.transports == []

    def test_delete_confirmed(self, runner, registry):
        """delete -y skips the prompt."""
        result = runner.invoke(cli_main.cli, BASE_ARGS + ["delete", "domain", "example.test", "-y"])

        assert result.exit_code == 0, result.output
        assert "Domain deleted: example.test" in result.stdout
        assert registry.sent_verbs() == ["login", "delete", "logout"]

    def test_delete_declined(self, runner, registry):
        """Declining the prompt sends nothing."""
        result = runner.invoke(cli_main.cli, BASE_ARGS + ["delete", "domain", "example.test"], input="n\n")

        assert result.exit_code == 0
        assert registry.transports == []

    def test_renew(self, runner, registry):
        """renew sends the current expiry date and period."""
        result = runner.invoke(
            cli_main.cli,
            BASE_ARGS + ["renew", "example.test", "--cur-exp-date", "2027-04-03", "--period", "2"],
        )

        assert result.exit_code == 0, result.output
        renew = sent_command(registry.sent[1]).find(f"{{{EPP_NS}}}renew/{{{DOMAIN_NS}}}renew")
        assert renew.findtext(f"{{{DOMAIN_NS}}}curExpDate") == "2027-04-03"
        assert renew.findtext(f"{{{DOMAIN_NS}}}period") == "2"

    def test_transfer(self, runner, registry):
        """transfer sends the operation."""
        result = runner.invoke(cli_main.cli, BASE_ARGS + ["transfer", "query", "domain", "example.test"])

        assert result.exit_code == 0, result.output
        assert sent_command(registry.sent[1]).find(f"{{{EPP_NS}}}transfer").get("op") == "query"

    def test_transfer_bad_op(self, runner, registry):
        """Unknown transfer operations are rejected by the argument parser."""
        result = runner.invoke(cli_main.cli, BASE_ARGS + ["transfer", "steal", "domain", "example.test"])

        assert result.exit_code == 2
        assert registry.transports == []


class TestPollCommands:
    """Tests for poll and ack."""

    def test_poll_empty(self, runner, registry):
        """An empty queue is reported."""
        registry.reply("poll", code=1300, msg="Command completed successfully; no messages")

        result = runner.invoke(cli_main.cli, BASE_ARGS + ["poll"])

        assert result.exit_code == 0, result.output
        assert "No messages in queue" in result.stdout

    def test_poll_empty_quiet(self, runner, registry):
        """--quiet suppresses the empty queue notice."""
        registry.reply("poll", code=1300, msg="Command completed successfully; no messages")

        result = runner.invoke(cli_main.cli, BASE_ARGS + ["--quiet", "poll"])

        assert result.exit_code == 0, result.output
        assert result.stdout == ""

    def test_ack(self, runner, registry):
        """ack sends the message ID."""
        result = runner.invoke(cli_main.cli, BASE_ARGS + ["ack", "12345"])

        assert result.exit_code == 0, result.output
        assert "Message acknowledged: 12345" in result.stdout
        assert sent_command(registry.sent[1]).find(f"{{{EPP_NS}}}poll").get("msgID") == "12345"


class TestErrors:
    """Tests for error reporting."""

    def test_login_failure_raises(self, runner, registry):
        """Session errors reach the entry point."""
        registry.login_code = 2200

        result = runner.invoke(cli_main.cli, BASE_ARGS + ["check", "domain", "example.test"])

        assert result.exit_code == 1
        assert isinstance(result.exception, EPPLoginError)

    def test_main_reports_errors(self, runner, registry, monkeypatch, capsys):
        """main() prints EPP errors and exits 1."""
        registry.login_code = 2200
        monkeypatch.setattr(sys, "argv", ["epp"] + BASE_ARGS + ["check", "domain", "example.test"])

        with pytest.raises(SystemExit) as exc:
            cli_main.main()

        assert exc.value.code == 1
        assert "ERROR: [2200]" in capsys.readouterr().err


class TestConfigCommands:
    """Tests for config commands."""

    def test_config_init(self, runner, tmp_path):
        """config init writes a loadable sample."""
        path = tmp_path / "epp" / "config.yaml"

        result = runner.invoke(cli_main.cli, ["config", "init", "--path", str(path)])

        assert result.exit_code == 0, result.output
        assert cli_config.CLIConfig.from_file(path).server.host == "epp.registry.example"

    def test_config_show(self, runner):
        """config show prints the merged settings."""
        result = runner.invoke(cli_main.cli, BASE_ARGS + ["--port", "7000", "config", "show"])

        assert result.exit_code == 0, result.output
        assert "epp.registry.example" in result.stdout
        assert "7000" in result.stdout
