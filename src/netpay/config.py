"""
Per-invocation configuration.

Everything a workflow needs beyond its own arguments travels in one
``Invocation``: the RPC client, the signing account, the gas price override,
the logger and the cancellation signal. Nothing here is process-global.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional

import httpx
from eth_account.signers.local import LocalAccount

from .chain.rpc import DEFAULT_TIMEOUT, RpcClient
from .errors import InputError
from .identity.keys import get_account

DEFAULT_EXPLORER_URL = "https://arbiscan.io/tx/"


def explorer_link(explorer_url: str, tx_hash: str) -> str:
    return f"{explorer_url.rstrip('/')}/{tx_hash}"


@dataclass(frozen=True)
class Invocation:
    rpc: RpcClient
    account: LocalAccount
    gas_price: int = 0
    explorer_url: str = DEFAULT_EXPLORER_URL
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("netpay"))

    @property
    def sender(self) -> str:
        return self.account.address

    @property
    def cancel(self) -> threading.Event:
        return self.rpc.cancel

    def tx_url(self, tx_hash: str) -> str:
        return explorer_link(self.explorer_url, tx_hash)

    @classmethod
    def create(
        cls,
        rpc_url: Optional[str],
        private_key: str,
        gas_price: int = 0,
        explorer_url: str = DEFAULT_EXPLORER_URL,
        logger: Optional[logging.Logger] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "Invocation":
        """
        Build the configuration for one workflow run.

        Args:
            rpc_url: RPC endpoint URL
            private_key: 0x-prefixed hex operator key
            gas_price: Gas price override in wei (0 = ask the network)
            explorer_url: Block explorer transaction URL prefix
            logger: Logger for this run (default: ``netpay``)
            timeout: Per-request RPC timeout in seconds
            transport: Optional httpx transport for the RPC client

        Raises:
            InputError: If the RPC URL is missing or the gas price is negative
        """
        if not rpc_url:
            raise InputError(
                "RPC URL is required, either through --rpc-url or the ARBITRUM_RPC_URL environment variable"
            )
        if gas_price < 0:
            raise InputError(f"Gas price must not be negative, got {gas_price}")

        try:
            account = get_account(private_key)
        except Exception as exc:
            raise InputError(f"Invalid private key: {exc}") from exc

        rpc = RpcClient(rpc_url, timeout=timeout, cancel=threading.Event(), transport=transport)
        return cls(
            rpc=rpc,
            account=account,
            gas_price=gas_price,
            explorer_url=explorer_url,
            logger=logger or logging.getLogger("netpay"),
        )
