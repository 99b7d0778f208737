"""
EPP CLI Main Entry Point

Command-line interface for EPP session operations.
"""

import getpass
import logging
import os
import sys
from pathlib import Path
from typing import Optional

import click

from epp_session import EPPClient, __version__
from epp_session.exceptions import EPPError
from epp_session.objects import ObjectType
from epp_cli.config import CLIConfig, create_sample_config
from epp_cli.output import OutputFormatter, print_error

logger = logging.getLogger("epp.cli")

OBJECT_TYPES = [t.value for t in ObjectType]


# Global state for the CLI session
class CLIState:
    config: Optional[CLIConfig] = None
    formatter: Optional[OutputFormatter] = None


state = CLIState()


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.option("--config", "-c", type=click.Path(exists=True), help="Config file path")
@click.option("--profile", "-p", default="default", help="Config profile to use")
@click.option("--host", "-h", help="EPP server hostname")
@click.option("--port", type=int, help="EPP server port (default 700)")
@click.option("--cert", type=click.Path(exists=True), help="Client certificate file")
@click.option("--key", type=click.Path(exists=True), help="Client private key file")
@click.option("--ca", type=click.Path(exists=True), help="CA certificate file")
@click.option("--tag", "-u", help="Registrar tag (EPP client ID)")
@click.option("--password", "-P", help="Password (or use EPP_PASSWORD env)")
@click.option("--compatibility", is_flag=True, help="Use legacy framing for older servers")
@click.option("--format", "-f", type=click.Choice(["table", "json", "xml"]), default="table", help="Output format")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, config, profile, host, port, cert, key, ca, tag, password, compatibility, format, quiet, debug):
    """
    EPP Session CLI - Registry Operations

    Every command connects, logs in, runs, logs out and disconnects.

    \b
    Configuration:
      Use a config file at ~/.epp/config.yaml or specify options on command line.
      Run 'epp config init' to create a sample config file.

    \b
    Examples:
      epp --host epp.registry.example --tag registrar1 check domain example.test
      epp -c config.yaml info contact sh8013
      epp --profile ote transfer query domain example.test --auth-info 2fooBAR
    """
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    state.formatter = OutputFormatter(format=format, quiet=quiet)

    if config:
        loaded = CLIConfig.from_file(Path(config), profile)
    else:
        loaded = CLIConfig.find_and_load(profile)
    state.config = loaded

    options = loaded.client_options() if loaded else {}

    # CLI options override config file
    if port is not None:
        options["port"] = port
    if cert:
        options["cert_file"] = cert
    if key:
        options["key_file"] = key
    if ca:
        options["ca_file"] = ca
    if compatibility:
        options["compatibility"] = True

    ctx.ensure_object(dict)
    ctx.obj["host"] = host or (loaded.server.host if loaded else None)
    ctx.obj["tag"] = tag or (loaded.credentials.tag if loaded else None)
    ctx.obj["password"] = (
        password
        or (loaded.credentials.password if loaded else None)
        or os.environ.get("EPP_PASSWORD")
    )
    ctx.obj["options"] = options


def get_client(ctx) -> EPPClient:
    """
    Create an EPP client from the merged configuration.

    Nothing is sent until a command runs.
    """
    host = ctx.obj.get("host")
    if not host:
        state.formatter.error("No server host specified. Use --host or config file.")
        sys.exit(1)

    tag = ctx.obj.get("tag")
    if not tag:
        state.formatter.error("No registrar tag specified. Use --tag or config file.")
        sys.exit(1)

    password = ctx.obj.get("password")
    if not password:
        password = getpass.getpass("Password: ")

    logger.debug(f"Client for {tag}@{host} with {ctx.obj['options']}")
    return EPPClient(tag, password, host, **ctx.obj["options"])


def _object_module(object_type: str):
    return ObjectType(object_type).module


def _output(client: EPPClient, result) -> None:
    raw = client.last_response.raw_xml if client.last_response else None
    state.formatter.output(result, raw_xml=raw)


# =============================================================================
# Config Commands
# =============================================================================

@cli.group()
def config():
    """Configuration management commands."""
    pass


@config.command("init")
@click.option("--path", "-p", type=click.Path(), default="~/.epp/config.yaml", help="Config file path")
def config_init(path):
    """Create sample configuration file."""
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.exists():
        if not click.confirm(f"{path} already exists. Overwrite?"):
            return

    path.write_text(create_sample_config())

    state.formatter.success(f"Created config file: {path}")
    state.formatter.info("Edit the file to configure your EPP connection settings.")


@config.command("show")
@click.pass_context
def config_show(ctx):
    """Show current configuration."""
    options = ctx.obj.get("options", {})
    info = {
        "host": ctx.obj.get("host") or "(not set)",
        "port": options.get("port", 700),
        "tag": ctx.obj.get("tag") or "(not set)",
        "certificate": options.get("cert_file") or "(not set)",
        "key": options.get("key_file") or "(not set)",
        "ca": options.get("ca_file") or "(not set)",
        "compatibility": options.get("compatibility", False),
        "profile": state.config.profile if state.config else "(no config file)",
    }
    state.formatter.output(info)


# =============================================================================
# Session Commands
# =============================================================================

@cli.command()
@click.pass_context
def hello(ctx):
    """Send hello and show the server greeting."""
    client = get_client(ctx)
    greeting = client.hello()
    state.formatter.output(greeting, raw_xml=greeting.raw_xml)


# =============================================================================
# Object Commands
# =============================================================================

@cli.command()
@click.argument("object_type", metavar="TYPE", type=click.Choice(OBJECT_TYPES))
@click.argument("ids", nargs=-1, required=True)
@click.pass_context
def check(ctx, object_type, ids):
    """
    Check availability of one or more objects.

    TYPE: domain, contact or host. IDS: names or contact IDs.
    """
    client = get_client(ctx)
    result = client.check(_object_module(object_type).Check(list(ids)))
    _output(client, result)


@cli.command()
@click.argument("object_type", metavar="TYPE", type=click.Choice(OBJECT_TYPES))
@click.argument("id")
@click.option("--auth-info", "-a", help="Auth info for objects sponsored by another registrar")
@click.pass_context
def info(ctx, object_type, id, auth_info):
    """Show object information."""
    module = _object_module(object_type)
    if object_type == ObjectType.HOST.value:
        payload = module.Info(id)
    else:
        payload = module.Info(id, auth_info=auth_info)

    client = get_client(ctx)
    result = client.info(payload)
    _output(client, result)


@cli.command()
@click.argument("object_type", metavar="TYPE", type=click.Choice(OBJECT_TYPES))
@click.argument("id")
@click.option("--confirm", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete(ctx, object_type, id, confirm):
    """Delete an object."""
    if not confirm and not click.confirm(f"Delete {object_type} {id}?"):
        return

    client = get_client(ctx)
    result = client.delete(_object_module(object_type).Delete(id))
    if result.success:
        state.formatter.success(f"{object_type.title()} deleted: {id}")
    _output(client, result)


@cli.command()
@click.argument("name")
@click.option("--cur-exp-date", "-e", required=True, help="Current expiry date (YYYY-MM-DD)")
@click.option("--period", type=int, default=1, help="Renewal period")
@click.option("--unit", type=click.Choice(["y", "m"]), default="y", help="Period unit")
@click.pass_context
def renew(ctx, name, cur_exp_date, period, unit):
    """Renew a domain."""
    module = _object_module(ObjectType.DOMAIN.value)
    client = get_client(ctx)
    result = client.renew(module.Renew(name, cur_exp_date, period=period, period_unit=unit))
    _output(client, result)


@cli.command()
@click.argument("op", type=click.Choice(["request", "query", "cancel", "approve", "reject"]))
@click.argument("object_type", metavar="TYPE", type=click.Choice([ObjectType.DOMAIN.value, ObjectType.CONTACT.value]))
@click.argument("id")
@click.option("--auth-info", "-a", help="Auth info")
@click.option("--period", type=int, help="Domain renewal period added by the transfer")
@click.pass_context
def transfer(ctx, op, object_type, id, auth_info, period):
    """
    Transfer operations.

    OP: request, query, cancel, approve or reject.
    """
    module = _object_module(object_type)
    if object_type == ObjectType.DOMAIN.value:
        payload = module.Transfer(id, auth_info=auth_info, period=period)
    else:
        payload = module.Transfer(id, auth_info=auth_info)

    client = get_client(ctx)
    result = client.transfer(op, payload)
    _output(client, result)


# =============================================================================
# Poll Commands
# =============================================================================

@cli.command()
@click.pass_context
def poll(ctx):
    """Request the next poll message."""
    client = get_client(ctx)
    response = client.poll()
    if response.code == 1300:
        state.formatter.info("No messages in queue")
        return
    _output(client, response)


@cli.command()
@click.argument("msg_id")
@click.pass_context
def ack(ctx, msg_id):
    """
    Acknowledge a poll message.

    MSG_ID: Message ID to acknowledge.
    """
    client = get_client(ctx)
    response = client.ack(msg_id)
    if response.success:
        state.formatter.success(f"Message acknowledged: {msg_id}")
    _output(client, response)


# =============================================================================
# Entry Point
# =============================================================================

def main():
    """Main entry point."""
    try:
        cli()
    except EPPError as e:
        print_error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nAborted.")
        sys.exit(130)


if __name__ == "__main__":
    main()
