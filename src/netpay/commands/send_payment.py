"""
Send Payment - Pay GRT into an open allocation.

Flow:
1. Validate amount, allocation ID and deployment id
2. Refuse deployments that carry curation signal
3. GRT.approve(Staking, amount)
4. Staking.collect(amount, allocationID)

Each transaction is confirmed before the next is sent.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import click

from ..chain.abi import approve_call, collect_call
from ..chain.contracts import GRT_TOKEN_ADDRESS, STAKING_ADDRESS
from ..chain.tx import GAS_LIMIT_COLLECT, GAS_LIMIT_DEFAULT, send_and_confirm
from ..config import Invocation
from ..errors import InputError
from ..utils import content_id_to_bytes, normalize_address, to_base_units
from .common import chain_options, make_invocation, reporting_errors
from .open_allocation import ensure_not_curated


@dataclass(frozen=True)
class PaymentResult:
    approve_tx_hash: str
    collect_tx_hash: str
    tokens: int


def send_payment(
    invocation: Invocation,
    allocation_id: str,
    deployment_id: str,
    amount: int,
    **poll_options: Any,
) -> PaymentResult:
    """
    Approve the staking contract for ``amount`` GRT and collect it into the allocation.

    Raises:
        InputError: Bad arguments or a curated deployment
        TransportError / UnconfirmedError / RevertedError: see ``send_and_confirm``
    """
    if amount == 0:
        raise InputError("amount must be greater than 0")
    tokens = to_base_units(amount)
    allocation = normalize_address(allocation_id, "allocation ID")
    content_id_to_bytes(deployment_id)

    ensure_not_curated(invocation, deployment_id)

    approve_tx, _ = send_and_confirm(
        invocation,
        GRT_TOKEN_ADDRESS,
        approve_call(STAKING_ADDRESS, tokens),
        "approve",
        gas_limit=GAS_LIMIT_DEFAULT,
        **poll_options,
    )
    collect_tx, _ = send_and_confirm(
        invocation,
        STAKING_ADDRESS,
        collect_call(tokens, allocation),
        "collect",
        gas_limit=GAS_LIMIT_COLLECT,
        **poll_options,
    )
    return PaymentResult(approve_tx_hash=approve_tx, collect_tx_hash=collect_tx, tokens=tokens)


@click.command("send-payment")
@click.option("--allocation-id", required=True, help="The allocation ID to pay to")
@click.option("--deployment-id", required=True, help="The deployment ID of the allocation")
@click.option("--amount", type=int, required=True, help="The amount to pay, in GRT")
@chain_options
def send_payment_cmd(
    allocation_id: str,
    deployment_id: str,
    amount: int,
    rpc_url: Optional[str],
    private_key_file: Optional[Path],
    gas_price: int,
    explorer_url: str,
) -> None:
    """Send a payment to an allocation."""
    with reporting_errors(explorer_url):
        invocation = make_invocation(rpc_url, private_key_file, gas_price, explorer_url)
        with invocation.rpc:
            result = send_payment(invocation, allocation_id, deployment_id, amount)

        click.secho("Payment sent", fg="green")
        click.echo(f"{amount} GRT sent to allocation {allocation_id}")
        click.echo(f"See transaction on explorer: {invocation.tx_url(result.collect_tx_hash)}")
