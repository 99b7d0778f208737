"""
Tests for session settings and the CLI configuration file.
"""

import socket

import pytest
import yaml

from epp_session.config import DEFAULT_SERVICES, SessionConfig
from epp_session.exceptions import EPPConfigurationError
from epp_cli.config import CLIConfig, create_sample_config


class TestSessionConfig:
    """Tests for SessionConfig."""

    def test_defaults(self):
        """Defaults match a plain RFC 5734 session."""
        config = SessionConfig(tag="registrar1", password="secret", host="epp.registry.example")

        assert config.port == 700
        assert config.lang == "en"
        assert config.version == "1.0"
        assert config.services == DEFAULT_SERVICES
        assert config.extensions == ()
        assert config.address_family is None
        assert not config.compatibility

    def test_frozen(self):
        """Settings cannot change after construction."""
        config = SessionConfig(tag="registrar1", password="secret", host="epp.registry.example")
        with pytest.raises(AttributeError):
            config.port = 7000

    def test_secrets_not_in_repr(self):
        """Neither the password nor the TLS context is shown."""
        config = SessionConfig(tag="registrar1", password="secret", host="epp.registry.example")
        assert "secret" not in repr(config)
        assert "ssl_context" not in repr(config)

    @pytest.mark.parametrize("value,expected", [
        ("AF_INET", socket.AF_INET),
        ("AF_INET6", socket.AF_INET6),
        (socket.AF_INET6, socket.AF_INET6),
        (None, None),
    ])
    def test_address_family(self, value, expected):
        """Address family accepts names and socket constants."""
        config = SessionConfig(
            tag="registrar1", password="secret", host="epp.registry.example", address_family=value,
        )
        assert config.address_family == expected

    def test_extensions_deduplicated(self):
        """Extension URNs are deduplicated in order."""
        config = SessionConfig(
            tag="registrar1",
            password="secret",
            host="epp.registry.example",
            extensions=["urn:b", "urn:a", "urn:b"],
        )
        assert config.extensions == ("urn:b", "urn:a")

    @pytest.mark.parametrize("port", [0, 70000, "700"])
    def test_invalid_port(self, port):
        """Ports must be integers in range."""
        with pytest.raises(EPPConfigurationError):
            SessionConfig(tag="registrar1", password="secret", host="epp.registry.example", port=port)


class TestCLIConfig:
    """Tests for the YAML configuration file."""

    def test_sample_config_loads(self):
        """The sample written by 'config init' is a valid configuration."""
        config = CLIConfig.from_dict(yaml.safe_load(create_sample_config()))

        assert config.server.host == "epp.registry.example"
        assert config.credentials.tag == "your_registrar_tag"
        assert config.session.extensions == ["urn:ietf:params:xml:ns:secDNS-1.1"]

    def test_profile(self):
        """Profiles replace the top-level settings."""
        config = CLIConfig.from_dict(yaml.safe_load(create_sample_config()), profile="ote")

        assert config.profile == "ote"
        assert config.server.host == "epp-ote.registry.example"
        assert config.credentials.tag == "ote_registrar"

    def test_missing_host(self):
        """A configuration without a host is rejected."""
        with pytest.raises(ValueError):
            CLIConfig.from_dict({"credentials": {"tag": "registrar1"}})

    def test_from_file_expands_paths(self, tmp_path, monkeypatch):
        """Certificate paths expand ~ and environment variables."""
        monkeypatch.setenv("EPP_CERTS", "/opt/certs")
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({
            "server": {"host": "epp.registry.example", "port": 7000, "compatibility": True},
            "certs": {"cert_file": "$EPP_CERTS/client.crt", "key_file": "~/client.key"},
        }))

        config = CLIConfig.from_file(path)

        assert config.certs.cert_file == "/opt/certs/client.crt"
        assert not config.certs.key_file.startswith("~")
        assert config.server.port == 7000
        assert config.server.compatibility

    def test_client_options(self):
        """Options map onto client keyword arguments."""
        config = CLIConfig.from_dict({
            "server": {"host": "epp.registry.example", "address_family": "AF_INET6"},
            "session": {"lang": "fr", "services": ["urn:ietf:params:xml:ns:domain-1.0"]},
        })
        options = config.client_options()

        assert options["address_family"] == "AF_INET6"
        assert options["lang"] == "fr"
        assert options["services"] == ("urn:ietf:params:xml:ns:domain-1.0",)

        session = SessionConfig(tag="registrar1", password="secret", host=config.server.host, **options)
        assert session.address_family == socket.AF_INET6

    def test_client_options_default_services(self):
        """Without services in the file the library default applies."""
        config = CLIConfig.from_dict({"server": {"host": "epp.registry.example"}})
        assert "services" not in config.client_options()
