"""
Contract call encoding for the staking, token and curation contracts.

Only the five methods the payment flows use are known here. Each call is
``selector ++ abi_encode(args)`` where the selector is the first four bytes
of keccak256 of the canonical method signature.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_hash.auto import keccak

from ..errors import InputError, TransportError
from ..utils import normalize_address

ZERO_BYTES32 = b"\x00" * 32


@dataclass(frozen=True)
class MethodDef:
    name: str
    inputs: tuple[tuple[str, str], ...]

    @property
    def types(self) -> list[str]:
        return [typ for _, typ in self.inputs]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.types)})"

    @property
    def selector(self) -> bytes:
        # Keccak-256, not NIST SHA3-256
        return keccak(self.signature.encode("utf-8"))[:4]

    def abi_inputs(self) -> list[dict[str, str]]:
        """ABI ``inputs`` entries, as found in a contract's JSON ABI."""
        return [{"internalType": typ, "name": arg, "type": typ} for arg, typ in self.inputs]


ALLOCATE_FROM = MethodDef(
    "allocateFrom",
    (
        ("_indexer", "address"),
        ("_subgraphDeploymentID", "bytes32"),
        ("_tokens", "uint256"),
        ("_allocationID", "address"),
        ("_metadata", "bytes32"),
        ("_proof", "bytes"),
    ),
)
APPROVE = MethodDef("approve", (("spender", "address"), ("amount", "uint256")))
COLLECT = MethodDef("collect", (("_tokens", "uint256"), ("_allocationID", "address")))
CLOSE_ALLOCATION = MethodDef("closeAllocation", (("_allocationID", "address"), ("_poi", "bytes32")))
IS_CURATED = MethodDef("isCurated", (("_subgraphDeploymentID", "bytes32"),))

METHODS: dict[str, MethodDef] = {
    method.signature: method
    for method in (ALLOCATE_FROM, APPROVE, COLLECT, CLOSE_ALLOCATION, IS_CURATED)
}


@dataclass(frozen=True)
class ContractCall:
    signature: str
    selector: bytes
    arguments: bytes

    @property
    def data(self) -> bytes:
        return self.selector + self.arguments

    @property
    def data_hex(self) -> str:
        return "0x" + self.data.hex()


def _coerce(typ: str, value: Any) -> Any:
    if typ == "address":
        return normalize_address(value)
    return value


def encode_call(signature: str, *args: Any) -> ContractCall:
    """
    ABI-encode a call to one of the supported methods.

    Args:
        signature: Canonical method signature, e.g. ``"approve(address,uint256)"``
        *args: Arguments in declaration order

    Raises:
        InputError: Unknown method, wrong argument count, or unencodable value
    """
    method = METHODS.get(signature)
    if method is None:
        raise InputError(f"Unsupported contract method {signature}")
    if len(args) != len(method.inputs):
        raise InputError(
            f"{method.name} expects {len(method.inputs)} arguments, got {len(args)}"
        )

    values = [_coerce(typ, value) for typ, value in zip(method.types, args)]
    try:
        encoded = encode(method.types, values)
    except (EncodingError, TypeError, ValueError) as exc:
        raise InputError(f"Cannot encode {method.name} arguments: {exc}") from exc

    return ContractCall(signature=signature, selector=method.selector, arguments=encoded)


def allocate_from_call(
    indexer: str,
    deployment_hash: bytes,
    tokens: int,
    allocation_id: str,
    proof: bytes,
) -> ContractCall:
    return encode_call(
        ALLOCATE_FROM.signature,
        indexer,
        deployment_hash,
        tokens,
        allocation_id,
        ZERO_BYTES32,
        proof,
    )


def approve_call(spender: str, amount: int) -> ContractCall:
    return encode_call(APPROVE.signature, spender, amount)


def collect_call(tokens: int, allocation_id: str) -> ContractCall:
    return encode_call(COLLECT.signature, tokens, allocation_id)


def close_allocation_call(allocation_id: str) -> ContractCall:
    return encode_call(CLOSE_ALLOCATION.signature, allocation_id, ZERO_BYTES32)


def is_curated_call(deployment_hash: bytes) -> ContractCall:
    return encode_call(IS_CURATED.signature, deployment_hash)


def decode_bool(data: str) -> bool:
    """Decode a single ``bool`` return value from 0x-prefixed hex."""
    try:
        raw = bytes.fromhex(data[2:] if data.startswith("0x") else data)
    except ValueError as exc:
        raise TransportError(f"Malformed return data {data!r}") from exc
    if not raw:
        raise TransportError("Empty return data where a bool was expected")
    try:
        (value,) = decode(["bool"], raw)
    except DecodingError as exc:
        raise TransportError(f"Cannot decode bool return value: {exc}") from exc
    return value
