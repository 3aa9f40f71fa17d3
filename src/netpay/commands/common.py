"""
Options and error reporting shared by the on-chain commands.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, NoReturn, Optional

import click

from ..chain.rpc import DEFAULT_RPC_URL_ENV
from ..config import DEFAULT_EXPLORER_URL, Invocation, explorer_link
from ..errors import NetpayError, OperationCancelled
from ..identity.keys import load_private_key


def chain_options(func: Callable) -> Callable:
    """Attach the RPC / key / gas options every transaction command takes."""
    options = [
        click.option(
            "--rpc-url",
            envvar=DEFAULT_RPC_URL_ENV,
            default=None,
            help="The RPC URL. If not provided, the ARBITRUM_RPC_URL env var is used",
        ),
        click.option(
            "--private-key-file",
            type=click.Path(dir_okay=False, path_type=Path),
            default=None,
            help=(
                "The private key file (if not provided, the NETWORK_PAYMENT_PRIVATE_KEY "
                "env var is used for the private key value directly)"
            ),
        ),
        click.option(
            "--gas-price",
            type=int,
            default=0,
            show_default=True,
            help="Gas price in wei. If 0, the gas price is fetched from the network",
        ),
        click.option(
            "--explorer-url",
            default=DEFAULT_EXPLORER_URL,
            show_default=True,
            help="Block explorer transaction URL prefix",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def make_invocation(
    rpc_url: Optional[str],
    private_key_file: Optional[Path],
    gas_price: int,
    explorer_url: str,
) -> Invocation:
    private_key = load_private_key(key_file=private_key_file)
    return Invocation.create(
        rpc_url,
        private_key,
        gas_price=gas_price,
        explorer_url=explorer_url,
    )


def fail(exc: NetpayError, explorer_url: str = DEFAULT_EXPLORER_URL) -> NoReturn:
    """Print a one-line error (plus explorer link when a hash exists) and exit."""
    click.secho(f"ERROR: {exc}", fg="red", err=True)
    if exc.tx_hash:
        click.echo(f"See transaction on explorer: {explorer_link(explorer_url, exc.tx_hash)}", err=True)
    sys.exit(exc.exit_code)


@contextmanager
def reporting_errors(explorer_url: str = DEFAULT_EXPLORER_URL) -> Iterator[None]:
    try:
        yield
    except NetpayError as exc:
        fail(exc, explorer_url)
    except KeyboardInterrupt:
        fail(OperationCancelled("Interrupted"), explorer_url)
