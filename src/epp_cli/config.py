"""
CLI Configuration

Loads EPP session settings from a YAML file, optionally per profile.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


# Default config locations
DEFAULT_CONFIG_PATHS = [
    Path.home() / ".epp" / "config.yaml",
    Path.home() / ".epp" / "config.yml",
    Path("/etc/epp/config.yaml"),
    Path("epp_config.yaml"),
]


@dataclass
class ServerConfig:
    """EPP server configuration."""
    host: str
    port: int = 700
    timeout: int = 30
    verify_server: bool = True
    compatibility: bool = False
    address_family: Optional[str] = None


@dataclass
class CertConfig:
    """Certificate configuration."""
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    ca_file: Optional[str] = None


@dataclass
class CredentialsConfig:
    """Credentials configuration."""
    tag: Optional[str] = None
    password: Optional[str] = None


@dataclass
class SessionOptions:
    """Login options. Empty services means the library default."""
    lang: str = "en"
    version: str = "1.0"
    services: List[str] = field(default_factory=list)
    extensions: List[str] = field(default_factory=list)


@dataclass
class CLIConfig:
    """Complete CLI configuration."""
    server: ServerConfig
    certs: CertConfig = field(default_factory=CertConfig)
    credentials: CredentialsConfig = field(default_factory=CredentialsConfig)
    session: SessionOptions = field(default_factory=SessionOptions)
    profile: str = "default"

    @classmethod
    def from_dict(cls, data: dict, profile: str = "default") -> "CLIConfig":
        """
        Create config from dictionary.

        Args:
            data: Configuration dictionary
            profile: Profile name; falls back to the top-level settings

        Raises:
            ValueError: If no server host is configured
        """
        if "profiles" in data and profile in data["profiles"]:
            profile_data = data["profiles"][profile]
        else:
            profile_data = data

        server_data = profile_data.get("server", {})
        if not server_data.get("host"):
            raise ValueError("Server host is required in configuration")

        server = ServerConfig(
            host=server_data["host"],
            port=server_data.get("port", 700),
            timeout=server_data.get("timeout", 30),
            verify_server=server_data.get("verify_server", True),
            compatibility=server_data.get("compatibility", False),
            address_family=server_data.get("address_family"),
        )

        certs_data = profile_data.get("certs", {})
        certs = CertConfig(
            cert_file=_expand_path(certs_data.get("cert_file")),
            key_file=_expand_path(certs_data.get("key_file")),
            ca_file=_expand_path(certs_data.get("ca_file")),
        )

        creds_data = profile_data.get("credentials", {})
        credentials = CredentialsConfig(
            tag=creds_data.get("tag"),
            password=creds_data.get("password"),
        )

        session_data = profile_data.get("session", {})
        session = SessionOptions(
            lang=session_data.get("lang", "en"),
            version=str(session_data.get("version", "1.0")),
            services=list(session_data.get("services") or []),
            extensions=list(session_data.get("extensions") or []),
        )

        return cls(
            server=server,
            certs=certs,
            credentials=credentials,
            session=session,
            profile=profile,
        )

    @classmethod
    def from_file(cls, path: Path, profile: str = "default") -> "CLIConfig":
        """Load config from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {}, profile)

    @classmethod
    def find_and_load(cls, profile: str = "default") -> Optional["CLIConfig"]:
        """Load config from the first default location that exists, if any."""
        for path in DEFAULT_CONFIG_PATHS:
            if path.exists():
                return cls.from_file(path, profile)
        return None

    def client_options(self) -> Dict[str, Any]:
        """Keyword options for EPPClient."""
        options = {
            "port": self.server.port,
            "timeout": self.server.timeout,
            "verify_server": self.server.verify_server,
            "compatibility": self.server.compatibility,
            "address_family": self.server.address_family,
            "cert_file": self.certs.cert_file,
            "key_file": self.certs.key_file,
            "ca_file": self.certs.ca_file,
            "lang": self.session.lang,
            "version": self.session.version,
            "extensions": tuple(self.session.extensions),
        }
        if self.session.services:
            options["services"] = tuple(self.session.services)
        return options


def _expand_path(path: Optional[str]) -> Optional[str]:
    """Expand environment variables and ~ in path."""
    if path is None:
        return None
    return os.path.expandvars(os.path.expanduser(path))


def create_sample_config() -> str:
    """Generate sample configuration YAML."""
    return """# EPP Client Configuration
# Copy to ~/.epp/config.yaml

# Default profile
server:
  host: epp.registry.example
  port: 700
  timeout: 30
  verify_server: true
  compatibility: false      # true for servers without RFC 5734 framing
  # address_family: AF_INET  # or AF_INET6, default tries all addresses

certs:
  cert_file: ~/.epp/client.crt
  key_file: ~/.epp/client.key
  ca_file: ~/.epp/ca.crt

credentials:
  tag: your_registrar_tag
  # password: your_password  # Optional, falls back to EPP_PASSWORD or a prompt

session:
  lang: en
  version: "1.0"
  # services default to the domain, contact and host namespaces
  extensions:
    - urn:ietf:params:xml:ns:secDNS-1.1

# Multiple profiles example
profiles:
  production:
    server:
      host: epp.registry.example
    certs:
      cert_file: ~/.epp/prod/client.crt
      key_file: ~/.epp/prod/client.key
    credentials:
      tag: prod_registrar

  ote:
    server:
      host: epp-ote.registry.example
    certs:
      cert_file: ~/.epp/ote/client.crt
      key_file: ~/.epp/ote/client.key
    credentials:
      tag: ote_registrar
"""
