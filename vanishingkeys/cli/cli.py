import base64
import json
import logging
import os
import sys
from importlib import metadata

import click
from boto3.dynamodb.types import Binary
from dotenv import find_dotenv, load_dotenv

from vanishingkeys.logging import LOG_FORMAT_OPEN_TELEMETRY, setup_logging
from vanishingkeys.models.secret import CreateResult, DeleteResult
from vanishingkeys.secretstore.secretstore import SecretStore

load_dotenv(find_dotenv())

try:
    VANISHINGKEYS_VERSION = metadata.version("vanishingkeys")
except metadata.PackageNotFoundError:
    VANISHINGKEYS_VERSION = os.environ.get("VANISHINGKEYS_VERSION", "unknown")

logger = logging.getLogger(__name__)


class Info:
    """An information object to pass data between CLI functions."""

    def __init__(self):  # Note: This object must have an empty constructor.
        """Create a new instance."""
        self.verbose: int = 0
        self.json = False
        self.store: SecretStore = None

    def get_store(self) -> SecretStore:
        if self.store is None:
            self.store = SecretStore.from_config()
        return self.store


pass_info = click.make_pass_decorator(Info, ensure=True)


def _json_default(value):
    # binary ciphertext is printed as base64
    if isinstance(value, Binary):
        value = value.value
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode()
    return str(value)


@click.group()
@click.option("--verbose", "-v", count=True, help="Enable verbose output.")
@click.option("--json", "-j", default=False, is_flag=True, help="Enable json output.")
@pass_info
@click.pass_context
def cli(ctx, info: Info, verbose: int, json: bool):
    """Manage one-time-readable secrets."""
    # Use the verbosity count and json flag to override LOG_LEVEL / LOG_FORMAT
    setup_logging(
        level="DEBUG" if verbose > 0 else None,
        log_format=LOG_FORMAT_OPEN_TELEMETRY if json else None,
    )
    info.verbose = verbose
    info.json = json

    @ctx.call_on_close
    def cleanup():
        if info.store is not None:
            info.store.close()


@cli.command()
def version():
    """Get the library version."""
    click.echo(click.style(VANISHINGKEYS_VERSION, bold=True))


@cli.command()
@click.argument("secret_id")
@click.option(
    "--secret",
    "-s",
    required=True,
    help="The already-encrypted payload to store.",
)
@click.option(
    "--ttl",
    "-t",
    type=click.IntRange(min=1),
    default=300,
    show_default=True,
    help="Seconds until the secret expires if never read.",
)
@pass_info
def create(info: Info, secret_id: str, secret: str, ttl: int):
    """Store a secret that can be read once."""
    result = info.get_store().create(secret_id, secret, ttl_duration=ttl)
    if result == CreateResult.ALREADY_EXISTS:
        click.echo(click.style(result.value, fg="yellow"))
    else:
        click.echo(click.style(result.value, fg="green"))


@cli.command()
@click.argument("secret_id")
@pass_info
def consume(info: Info, secret_id: str):
    """Read a secret once; it vanishes afterwards."""
    secret = info.get_store().fetch_and_consume(secret_id)
    if secret is None:
        click.echo(click.style("not found", fg="red", bold=True))
        sys.exit(1)
    click.echo(json.dumps(secret.to_item(), default=_json_default, indent=4))


@cli.command()
@click.argument("secret_id")
@pass_info
def delete(info: Info, secret_id: str):
    """Delete a secret whether or not it was read."""
    result = info.get_store().delete(secret_id)
    if result == DeleteResult.NOT_FOUND:
        click.echo(click.style(result.value, fg="yellow"))
    else:
        click.echo(click.style(result.value, fg="green"))


if __name__ == "__main__":
    cli(auto_envvar_prefix="VANISHINGKEYS")
