"""
Tests for contract call encoding.
"""

from __future__ import annotations

import pytest
from eth_abi import decode

from netpay.chain.abi import (
    ALLOCATE_FROM,
    APPROVE,
    CLOSE_ALLOCATION,
    COLLECT,
    ZERO_BYTES32,
    allocate_from_call,
    approve_call,
    close_allocation_call,
    collect_call,
    decode_bool,
    encode_call,
)
from netpay.chain.contracts import STAKING_ADDRESS
from netpay.errors import InputError, TransportError

from .conftest import INDEXER_ADDRESS

ALLOCATION_ID = "0x1111111111111111111111111111111111111111"


def _word(data: bytes, index: int) -> int:
    start = 4 + 32 * index
    return int.from_bytes(data[start:start + 32], "big")


class TestSignatures:
    def test_canonical_signatures(self) -> None:
        assert ALLOCATE_FROM.signature == "allocateFrom(address,bytes32,uint256,address,bytes32,bytes)"
        assert APPROVE.signature == "approve(address,uint256)"
        assert COLLECT.signature == "collect(uint256,address)"
        assert CLOSE_ALLOCATION.signature == "closeAllocation(address,bytes32)"

    def test_approve_selector(self) -> None:
        assert APPROVE.selector.hex() == "095ea7b3"

    def test_abi_inputs(self) -> None:
        assert COLLECT.abi_inputs() == [
            {"internalType": "uint256", "name": "_tokens", "type": "uint256"},
            {"internalType": "address", "name": "_allocationID", "type": "address"},
        ]


class TestEncodeCall:
    def test_approve(self) -> None:
        call = approve_call(STAKING_ADDRESS, 22 * 10**18)
        assert call.data[:4] == APPROVE.selector
        assert len(call.data) == 4 + 64
        spender, amount = decode(APPROVE.types, call.arguments)
        assert spender.lower() == STAKING_ADDRESS.lower()
        assert amount == 22 * 10**18
        assert call.data_hex == "0x" + call.data.hex()

    def test_allocate_from_with_empty_proof(self) -> None:
        call = allocate_from_call(INDEXER_ADDRESS, b"\x11" * 32, 10**18, ALLOCATION_ID, b"")
        assert len(call.data) == 4 + 7 * 32
        # dynamic bytes: offset word, then zero length
        assert _word(call.data, 5) == 192
        assert _word(call.data, 6) == 0

    def test_allocate_from_fields(self) -> None:
        proof = b"\xaa" * 65
        call = allocate_from_call(INDEXER_ADDRESS, b"\x11" * 32, 20 * 10**18, ALLOCATION_ID, proof)
        indexer, deployment, tokens, allocation, metadata, decoded_proof = decode(
            ALLOCATE_FROM.types, call.arguments
        )
        assert indexer.lower() == INDEXER_ADDRESS.lower()
        assert deployment == b"\x11" * 32
        assert tokens == 20 * 10**18
        assert allocation.lower() == ALLOCATION_ID
        assert metadata == ZERO_BYTES32
        assert decoded_proof == proof

    def test_collect(self) -> None:
        call = collect_call(2 * 10**18, ALLOCATION_ID)
        assert decode(COLLECT.types, call.arguments) == (2 * 10**18, ALLOCATION_ID)

    def test_close_allocation_uses_zero_poi(self) -> None:
        call = close_allocation_call(ALLOCATION_ID)
        allocation, poi = decode(CLOSE_ALLOCATION.types, call.arguments)
        assert allocation.lower() == ALLOCATION_ID
        assert poi == ZERO_BYTES32

    def test_unknown_method(self) -> None:
        with pytest.raises(InputError, match="Unsupported"):
            encode_call("transfer(address,uint256)", STAKING_ADDRESS, 1)

    def test_wrong_argument_count(self) -> None:
        with pytest.raises(InputError, match="expects 2 arguments"):
            encode_call(APPROVE.signature, STAKING_ADDRESS)

    def test_bad_address(self) -> None:
        with pytest.raises(InputError):
            approve_call("0x1234", 1)

    def test_unencodable_value(self) -> None:
        with pytest.raises(InputError, match="Cannot encode"):
            approve_call(STAKING_ADDRESS, -1)


class TestDecodeBool:
    def test_true(self) -> None:
        assert decode_bool("0x" + "00" * 31 + "01") is True

    def test_false(self) -> None:
        assert decode_bool("0x" + "00" * 32) is False

    @pytest.mark.parametrize("data", ["0x", "0xzz", "0x01"])
    def test_malformed(self, data: str) -> None:
        with pytest.raises(TransportError):
            decode_bool(data)
