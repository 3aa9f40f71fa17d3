"""
Protocol contracts on Arbitrum One.

Addresses are fixed: the tool targets one staking contract, one token and
one curation contract.
"""

from __future__ import annotations

from ..utils import content_id_to_bytes
from .abi import decode_bool, is_curated_call
from .rpc import RpcClient

CHAIN_ID = 42161
GRT_TOKEN_ADDRESS = "0x9623063377AD1B27544C965cCd7342f7EA7e88C7"
STAKING_ADDRESS = "0x00669A4CF01450B64E8A2A20E9b1FCB71E61eF03"
L2_CURATION_ADDRESS = "0x22d78fb4bc72e191C765807f8891B5e1785C8014"


def is_curated(rpc: RpcClient, deployment_id: str) -> bool:
    """
    Ask the curation contract whether ``deployment_id`` has curation signal.

    Curated deployments cannot receive direct payments.

    Raises:
        InputError: If the deployment id cannot be decoded
        TransportError: If the call fails or returns something other than a bool
    """
    call = is_curated_call(content_id_to_bytes(deployment_id))
    result = rpc.eth_call(L2_CURATION_ADDRESS, call.data_hex)
    return decode_bool(result)
