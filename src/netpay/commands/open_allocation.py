"""
Open Allocation - Stake tokens on a deployment under a fresh allocation ID.

Flow:
1. Validate amount, indexer address and deployment id
2. Refuse deployments that carry curation signal
3. Generate a disposable allocation key and its proof
4. Call Staking.allocateFrom(indexer, deployment, tokens, allocationID, 0, proof)
5. Wait for the receipt and require emitted logs
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import click

from ..chain.abi import allocate_from_call
from ..chain.contracts import STAKING_ADDRESS, is_curated
from ..chain.tx import GAS_LIMIT_DEFAULT, send_and_confirm
from ..config import Invocation
from ..deployment import DEFAULT_IPFS_URL, generate_deployment
from ..errors import InputError, TransportError
from ..identity.allocation import generate_allocation_identity
from ..utils import content_id_to_bytes, normalize_address, to_base_units
from .common import chain_options, make_invocation, reporting_errors


@dataclass(frozen=True)
class AllocationResult:
    tx_hash: str
    allocation_id: str
    deployment_id: str


def ensure_not_curated(invocation: Invocation, deployment_id: str) -> None:
    try:
        curated = is_curated(invocation.rpc, deployment_id)
    except TransportError as exc:
        raise TransportError(f"failed to check if curated: {exc}", code=exc.code) from exc
    if curated:
        raise InputError(
            "deployment has curation and cannot be paid to. "
            "please use a different deployment and open a new allocation"
        )


def check_allocation_inputs(indexer_address: str, amount: int) -> tuple[int, str]:
    """Validate amount and indexer ahead of any network access. Returns (tokens, indexer)."""
    if amount == 0:
        raise InputError("amount must be greater than 0")
    tokens = to_base_units(amount)
    return tokens, normalize_address(indexer_address, "indexer address")


def open_allocation(
    invocation: Invocation,
    indexer_address: str,
    deployment_id: str,
    amount: int,
    **poll_options: Any,
) -> AllocationResult:
    """
    Open an allocation of ``amount`` GRT for ``indexer_address`` on ``deployment_id``.

    Raises:
        InputError: Bad arguments or a curated deployment
        IdentityError: Allocation proof could not be produced
        TransportError / UnconfirmedError / RevertedError: see ``send_and_confirm``
    """
    tokens, indexer = check_allocation_inputs(indexer_address, amount)
    deployment_hash = content_id_to_bytes(deployment_id)

    ensure_not_curated(invocation, deployment_id)

    identity = generate_allocation_identity(indexer)
    invocation.logger.info("generated allocation %s for indexer %s", identity.address, indexer)

    call = allocate_from_call(indexer, deployment_hash, tokens, identity.address, identity.proof)
    tx_hash, _ = send_and_confirm(
        invocation,
        STAKING_ADDRESS,
        call,
        "allocate",
        gas_limit=GAS_LIMIT_DEFAULT,
        **poll_options,
    )
    return AllocationResult(
        tx_hash=tx_hash,
        allocation_id=identity.address,
        deployment_id=deployment_id,
    )


@click.command("open-allocation")
@click.option("--indexer-address", required=True, help="The indexer address (note: NOT the operator address)")
@click.option(
    "--deployment-id",
    default=None,
    help="The deployment ID being allocated to. If left empty, a random deployment ID is generated",
)
@click.option("--allocation-amount", type=int, required=True, help="The allocation amount in GRT")
@click.option(
    "--ipfs-url",
    envvar="NETPAY_IPFS_URL",
    default=DEFAULT_IPFS_URL,
    show_default=True,
    help="IPFS add endpoint used to mint a placeholder deployment",
)
@chain_options
def open_allocation_cmd(
    indexer_address: str,
    deployment_id: Optional[str],
    allocation_amount: int,
    ipfs_url: str,
    rpc_url: Optional[str],
    private_key_file: Optional[Path],
    gas_price: int,
    explorer_url: str,
) -> None:
    """Open an allocation."""
    with reporting_errors(explorer_url):
        invocation = make_invocation(rpc_url, private_key_file, gas_price, explorer_url)
        with invocation.rpc:
            check_allocation_inputs(indexer_address, allocation_amount)
            if not deployment_id:
                click.echo("No deployment ID provided, generating a random one")
                deployment_id = generate_deployment(ipfs_url)

            result = open_allocation(invocation, indexer_address, deployment_id, allocation_amount)

        click.secho("Allocation opened successfully", fg="green")
        click.echo(f"Allocation created with ID: {result.allocation_id}")
        click.echo(f"Deployment ID: {result.deployment_id}")
        click.echo(f"See transaction on explorer: {invocation.tx_url(result.tx_hash)}")
