"""Shared fixtures: an in-memory JSON-RPC node behind httpx.MockTransport."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

import httpx
import pytest
import rlp
from eth_hash.auto import keccak
from eth_utils import to_checksum_address

from netpay.config import Invocation

# Well-known development key (hardhat / anvil account #0)
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

INDEXER_ADDRESS = to_checksum_address("0x35917c0eb91d2e21bef40940d028940484230c06")

SAMPLE_LOG = {
    "address": "0x00669a4cf01450b64e8a2a20e9b1fcb71e61ef03",
    "topics": ["0x" + "ab" * 32],
    "data": "0x",
}


class FakeChain:
    """Minimal JSON-RPC node: tracks nonces, records broadcasts, serves receipts."""

    def __init__(self, chain_id: int = 42161, gas_price: int = 100_000_000, nonce: int = 7) -> None:
        self.chain_id = chain_id
        self.gas_price = gas_price
        self.nonce = nonce
        self.curated = False
        self.receipt_misses = 0
        self.logs: list[dict] = [SAMPLE_LOG]
        self.status = "0x1"
        self.errors: dict[str, dict] = {}
        self.calls: list[tuple[str, list]] = []
        self.sent: list[bytes] = []
        self._pending: dict[str, int] = {}

    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        method, params = body["method"], body["params"]
        self.calls.append((method, params))

        if method in self.errors:
            return httpx.Response(
                200, json={"jsonrpc": "2.0", "id": body["id"], "error": self.errors[method]}
            )

        result = getattr(self, f"_{method}")(params)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    def _eth_getTransactionCount(self, params: list) -> str:
        return hex(self.nonce)

    def _eth_gasPrice(self, params: list) -> str:
        return hex(self.gas_price)

    def _eth_chainId(self, params: list) -> str:
        return hex(self.chain_id)

    def _eth_call(self, params: list) -> str:
        return "0x" + int(self.curated).to_bytes(32, "big").hex()

    def _eth_sendRawTransaction(self, params: list) -> str:
        raw = bytes.fromhex(params[0][2:])
        self.sent.append(raw)
        self.nonce += 1
        tx_hash = "0x" + keccak(raw).hex()
        self._pending[tx_hash] = self.receipt_misses
        return tx_hash

    def _eth_getTransactionReceipt(self, params: list) -> Optional[dict]:
        tx_hash = params[0]
        remaining = self._pending.get(tx_hash)
        if remaining is None:
            return None
        if remaining > 0:
            self._pending[tx_hash] = remaining - 1
            return None
        return {
            "transactionHash": tx_hash,
            "status": self.status,
            "blockNumber": "0x10",
            "logs": list(self.logs),
        }


@dataclass(frozen=True)
class LegacyTx:
    nonce: int
    gas_price: int
    gas: int
    to: str
    value: int
    data: bytes
    v: int


def decode_legacy_tx(raw: bytes) -> LegacyTx:
    fields = rlp.decode(raw)
    as_int = lambda b: int.from_bytes(b, "big")  # noqa: E731
    return LegacyTx(
        nonce=as_int(fields[0]),
        gas_price=as_int(fields[1]),
        gas=as_int(fields[2]),
        to="0x" + fields[3].hex(),
        value=as_int(fields[4]),
        data=fields[5],
        v=as_int(fields[6]),
    )


def no_sleep(delay: float) -> Any:
    return None


@pytest.fixture()
def chain() -> FakeChain:
    return FakeChain()


@pytest.fixture()
def invocation(chain: FakeChain) -> Invocation:
    inv = Invocation.create(
        "http://rpc.test",
        TEST_PRIVATE_KEY,
        transport=httpx.MockTransport(chain.handler),
    )
    yield inv
    inv.rpc.close()
