"""
Close Allocation - Close an open allocation with an empty proof of indexing.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import click

from ..chain.abi import close_allocation_call
from ..chain.contracts import STAKING_ADDRESS
from ..chain.tx import GAS_LIMIT_DEFAULT, send_and_confirm
from ..config import Invocation
from ..utils import normalize_address
from .common import chain_options, make_invocation, reporting_errors


def close_allocation(invocation: Invocation, allocation_id: str, **poll_options: Any) -> str:
    """Call Staking.closeAllocation(allocationID, 0x0) and return the confirmed hash."""
    allocation = normalize_address(allocation_id, "allocation ID")
    call = close_allocation_call(allocation)
    tx_hash, _ = send_and_confirm(
        invocation,
        STAKING_ADDRESS,
        call,
        "close allocation",
        gas_limit=GAS_LIMIT_DEFAULT,
        **poll_options,
    )
    return tx_hash


@click.command("close-allocation")
@click.option("--allocation-id", required=True, help="The allocation ID to close")
@chain_options
def close_allocation_cmd(
    allocation_id: str,
    rpc_url: Optional[str],
    private_key_file: Optional[Path],
    gas_price: int,
    explorer_url: str,
) -> None:
    """Close an allocation."""
    with reporting_errors(explorer_url):
        invocation = make_invocation(rpc_url, private_key_file, gas_price, explorer_url)
        with invocation.rpc:
            tx_hash = close_allocation(invocation, allocation_id)

        click.secho("Allocation closed successfully", fg="green")
        click.echo(f"See transaction on explorer: {invocation.tx_url(tx_hash)}")
