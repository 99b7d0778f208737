"""
Tests for the command catalog.
"""

import pytest

from epp_session import commands
from epp_session.commands import CATALOG, TRANSFER_OPERATIONS, build_command, wrap_response
from epp_session.exceptions import EPPInvalidOperationError
from epp_session.objects import ObjectType, contact, domain, host
from epp_session.xml_parser import XMLParser

from conftest import response_xml


class TestCatalog:
    """Tests for the verb catalog."""

    def test_every_verb_registered(self):
        """All EPP query and transform verbs plus poll are cataloged."""
        assert set(CATALOG) == {
            "check", "create", "delete", "info", "renew", "transfer", "update", "poll",
        }

    @pytest.mark.parametrize("verb", ["check", "create", "delete", "info", "renew", "update"])
    def test_command_verbs(self, verb):
        """Command classes carry their verb."""
        assert CATALOG[verb].command.verb == verb

    def test_unknown_verb(self):
        """Unknown verbs are rejected."""
        with pytest.raises(EPPInvalidOperationError):
            build_command("restore", domain.Delete("example.test"))

    def test_build_command(self):
        """build_command instantiates the cataloged command."""
        cmd = build_command("info", host.Info("ns1.example.test"))
        assert isinstance(cmd, commands.Info)
        assert cmd.object_type is ObjectType.HOST

    def test_wrap_response(self):
        """Responses are wrapped in the module's class for the verb."""
        raw = XMLParser.parse_response(response_xml())
        wrapped = wrap_response("delete", contact, raw)
        assert isinstance(wrapped, contact.DeleteResponse)
        assert wrapped.response is raw

    def test_poll_is_not_wrapped(self):
        """Poll responses stay raw."""
        raw = XMLParser.parse_response(response_xml(1300, "No messages"))
        assert wrap_response("poll", None, raw) is raw


class TestCommand:
    """Tests for command construction."""

    def test_payload_verb_mismatch(self):
        """A payload for one verb cannot be sent as another."""
        with pytest.raises(EPPInvalidOperationError):
            commands.Check(domain.Info("example.test"))

    def test_non_payload(self):
        """Objects without a build method are not payloads."""
        with pytest.raises(EPPInvalidOperationError):
            commands.Info("example.test")

    def test_no_attributes(self):
        """Plain commands set no verb attributes."""
        assert commands.Delete(domain.Delete("example.test")).attributes == {}


class TestTransfer:
    """Tests for transfer operations."""

    @pytest.mark.parametrize("op", TRANSFER_OPERATIONS)
    def test_valid_operations(self, op):
        """Every RFC 5730 transfer operation is accepted."""
        cmd = commands.Transfer(op, domain.Transfer("example.test"))
        assert cmd.attributes == {"op": op}

    @pytest.mark.parametrize("op", ["steal", "", "QUERY", None])
    def test_invalid_operations(self, op):
        """Anything else is rejected."""
        with pytest.raises(EPPInvalidOperationError):
            commands.Transfer(op, domain.Transfer("example.test"))


class TestPoll:
    """Tests for poll and ack."""

    def test_request(self):
        """Poll without an ID is a request."""
        cmd = commands.Poll()
        assert cmd.attributes == {"op": "req"}
        assert cmd.object_type is None

    def test_ack(self):
        """Poll with an ID acknowledges it."""
        assert commands.Poll("12345").attributes == {"op": "ack", "msgID": "12345"}

    def test_ack_numeric_id(self):
        """Numeric IDs are sent as text."""
        assert commands.Poll(12345).attributes["msgID"] == "12345"

    @pytest.mark.parametrize("msg_id", ["", "   "])
    def test_ack_blank_id(self, msg_id):
        """Blank IDs are rejected."""
        with pytest.raises(EPPInvalidOperationError):
            commands.Poll(msg_id)
