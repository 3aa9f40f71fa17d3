"""
Batch - Write a Safe Transaction Builder document for a full payment cycle.

The document holds four calls to be signed offline from a Safe:
allocateFrom, approve, collect and closeAllocation. No RPC access is needed;
only the placeholder deployment is minted over IPFS when none is given.
"""

from __future__ import annotations

import json
import time
from typing import Any, Optional

import click

from ..chain.abi import ALLOCATE_FROM, APPROVE, CLOSE_ALLOCATION, COLLECT, MethodDef, ZERO_BYTES32
from ..chain.contracts import CHAIN_ID, GRT_TOKEN_ADDRESS, STAKING_ADDRESS
from ..deployment import DEFAULT_IPFS_URL, generate_deployment
from ..identity.allocation import AllocationIdentity, generate_allocation_identity
from ..utils import content_id_to_bytes, normalize_address, to_base_units
from .common import reporting_errors

TX_BUILDER_VERSION = "1.18.0"
ZERO_BYTES32_HEX = "0x" + ZERO_BYTES32.hex()


def _transaction(to: str, method: MethodDef, values: dict[str, str]) -> dict[str, Any]:
    return {
        "to": to,
        "value": "0",
        "data": None,
        "contractMethod": {
            "inputs": method.abi_inputs(),
            "name": method.name,
            "payable": False,
        },
        "contractInputsValues": values,
    }


def build_batch(
    indexer_address: str,
    deployment_id: str,
    identity: AllocationIdentity,
    alloc_amount: int,
    pay_amount: int,
    created_at: Optional[int] = None,
) -> dict[str, Any]:
    """
    Build the batch document.

    ``approve`` covers both the allocation stake and the payment, since the
    staking contract pulls both from the Safe.
    """
    indexer = normalize_address(indexer_address, "indexer address")
    deployment_hex = "0x" + content_id_to_bytes(deployment_id).hex()
    alloc_tokens = to_base_units(alloc_amount)
    pay_tokens = to_base_units(pay_amount)
    approve_tokens = to_base_units(alloc_amount + pay_amount)

    return {
        "version": "1.0",
        "chainId": str(CHAIN_ID),
        "createdAt": created_at if created_at is not None else int(time.time() * 1000),
        "meta": {
            "name": "Transactions Batch",
            "description": "",
            "txBuilderVersion": TX_BUILDER_VERSION,
            "createdFromSafeAddress": "",
            "createdFromOwnerAddress": "",
        },
        "transactions": [
            _transaction(
                STAKING_ADDRESS,
                ALLOCATE_FROM,
                {
                    "_indexer": indexer,
                    "_subgraphDeploymentID": deployment_hex,
                    "_tokens": str(alloc_tokens),
                    "_allocationID": identity.address,
                    "_metadata": ZERO_BYTES32_HEX,
                    "_proof": identity.proof_hex,
                },
            ),
            _transaction(
                GRT_TOKEN_ADDRESS,
                APPROVE,
                {"spender": STAKING_ADDRESS, "amount": str(approve_tokens)},
            ),
            _transaction(
                STAKING_ADDRESS,
                COLLECT,
                {"_tokens": str(pay_tokens), "_allocationID": identity.address},
            ),
            _transaction(
                STAKING_ADDRESS,
                CLOSE_ALLOCATION,
                {"_allocationID": identity.address, "_poi": ZERO_BYTES32_HEX},
            ),
        ],
    }


@click.command("batch")
@click.argument("alloc_amount", type=int)
@click.argument("pay_amount", type=int)
@click.argument("indexer")
@click.option("--deployment-id", default=None, help="Deployment to allocate to (default: mint a placeholder)")
@click.option(
    "--ipfs-url",
    envvar="NETPAY_IPFS_URL",
    default=DEFAULT_IPFS_URL,
    show_default=True,
    help="IPFS add endpoint used to mint a placeholder deployment",
)
@click.option("--indent", type=int, default=None, help="Pretty-print the JSON with this indent")
def batch(
    alloc_amount: int,
    pay_amount: int,
    indexer: str,
    deployment_id: Optional[str],
    ipfs_url: str,
    indent: Optional[int],
) -> None:
    """
    Write a Safe multi-transaction JSON document for a GRT payment.

    \b
    Example:
        netpay batch 20 2 0x35917C0eB91d2E21BEF40940D028940484230c06
    """
    with reporting_errors():
        to_base_units(alloc_amount)
        to_base_units(pay_amount)
        identity = generate_allocation_identity(indexer)
        if not deployment_id:
            deployment_id = generate_deployment(ipfs_url)

        document = build_batch(indexer, deployment_id, identity, alloc_amount, pay_amount)

    separators = (",", ":") if indent is None else None
    click.echo(json.dumps(document, indent=indent, separators=separators))
