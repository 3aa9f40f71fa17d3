"""
JSON-RPC client for the execution chain.

Lightweight alternative to web3.py: httpx for HTTP, plain dicts for results.
Exposes only the calls the payment pipeline needs: nonce, gas price, chain
id, read-only call, raw broadcast and receipt lookup.
"""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Any, Optional

import httpx

from ..errors import OperationCancelled, TransportError

logger = logging.getLogger(__name__)

DEFAULT_RPC_URL_ENV = "ARBITRUM_RPC_URL"
DEFAULT_TIMEOUT = 30.0


def _parse_quantity(value: Any, method: str) -> int:
    if not isinstance(value, str) or not value.startswith("0x"):
        raise TransportError(f"{method}: malformed quantity {value!r}")
    try:
        return int(value, 16)
    except ValueError as exc:
        raise TransportError(f"{method}: malformed quantity {value!r}") from exc


class RpcClient:
    """
    Synchronous JSON-RPC 2.0 client.

    Args:
        url: RPC endpoint URL
        timeout: Per-request timeout in seconds
        cancel: Cancellation signal checked before every request
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``)
    """

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        cancel: Optional[threading.Event] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = url
        self.cancel = cancel or threading.Event()
        self._ids = itertools.count(1)
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "RpcClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def call(self, method: str, params: list) -> Any:
        """
        Make a JSON-RPC call.

        Returns:
            Result field from the RPC response (may be None)

        Raises:
            OperationCancelled: If the cancellation signal is set
            TransportError: If the request fails or the node returns an error
        """
        # A request already in flight is bounded by the client timeout, not by cancel
        if self.cancel.is_set():
            raise OperationCancelled(f"{method}: cancelled")

        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }

        logger.debug("rpc request %s id=%s", method, payload["id"])
        try:
            response = self._client.post(self.url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            raise TransportError(f"{method}: {exc}") from exc
        except ValueError as exc:
            raise TransportError(f"{method}: invalid JSON response: {exc}") from exc

        if not isinstance(data, dict):
            raise TransportError(f"{method}: unexpected response {data!r}")

        if data.get("error"):
            error = data["error"]
            if isinstance(error, dict):
                raise TransportError(
                    f"{method}: RPC error: {error.get('message', error)}",
                    code=error.get("code"),
                )
            raise TransportError(f"{method}: RPC error: {error}")

        return data.get("result")

    def get_nonce(self, address: str) -> int:
        """Transaction count for ``address`` at the latest block."""
        result = self.call("eth_getTransactionCount", [address, "latest"])
        return _parse_quantity(result, "eth_getTransactionCount")

    def get_gas_price(self) -> int:
        result = self.call("eth_gasPrice", [])
        return _parse_quantity(result, "eth_gasPrice")

    def get_chain_id(self) -> int:
        result = self.call("eth_chainId", [])
        return _parse_quantity(result, "eth_chainId")

    def eth_call(self, to: str, data: str) -> str:
        """Read-only contract call at the latest block. Returns 0x-prefixed hex."""
        result = self.call("eth_call", [{"to": to, "data": data}, "latest"])
        if not isinstance(result, str) or not result.startswith("0x"):
            raise TransportError(f"eth_call: malformed result {result!r}")
        return result

    def send_raw_transaction(self, raw_tx: str) -> str:
        """Broadcast a signed transaction. Returns the transaction hash."""
        result = self.call("eth_sendRawTransaction", [raw_tx])
        if not isinstance(result, str) or not result.startswith("0x"):
            raise TransportError(f"eth_sendRawTransaction: malformed hash {result!r}")
        return result

    def get_transaction_receipt(self, tx_hash: str) -> Optional[dict]:
        """Receipt for ``tx_hash``, or None while the transaction is unmined."""
        result = self.call("eth_getTransactionReceipt", [tx_hash])
        if result is None:
            return None
        if not isinstance(result, dict):
            raise TransportError(f"eth_getTransactionReceipt: malformed receipt {result!r}")
        return result
