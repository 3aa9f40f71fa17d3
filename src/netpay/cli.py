"""
netpay CLI

Command-line interface for paying GRT through The Graph staking contracts on
Arbitrum One.

Commands:
  open-allocation  - Open an allocation on a deployment
  send-payment     - Pay GRT into an allocation
  close-allocation - Close an allocation
  batch            - Write a Safe multi-transaction JSON document
  whoami           - Show the sender address for the configured key
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .commands.batch import batch
from .commands.close_allocation import close_allocation_cmd
from .commands.common import reporting_errors
from .commands.open_allocation import open_allocation_cmd
from .commands.send_payment import send_payment_cmd
from .identity.keys import get_address, load_private_key

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="netpay")
@click.option("-v", "--verbose", is_flag=True, help="Log RPC and transaction details to stderr")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """netpay - GRT network payments."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(open_allocation_cmd)
cli.add_command(send_payment_cmd)
cli.add_command(close_allocation_cmd)
cli.add_command(batch)


# ============ Identity ============


@cli.command()
@click.option(
    "--private-key-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="The private key file (default: NETWORK_PAYMENT_PRIVATE_KEY env var)",
)
def whoami(private_key_file: Optional[Path]) -> None:
    """Show the sender address for the configured key."""
    with reporting_errors():
        address = get_address(load_private_key(key_file=private_key_file))
    click.echo(f"Address: {address}")


# ============ Entry Points ============


def main() -> None:
    """netpay CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
