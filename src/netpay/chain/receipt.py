"""
Receipt confirmation polling.

A broadcast transaction is polled until its receipt appears, with a backoff
that doubles from 500ms up to 12s. After five minutes without a receipt the
poller gives up and returns None: the transaction may still land, so callers
must treat that as an unknown outcome rather than a failure.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional

from ..errors import OperationCancelled, TransportError
from .rpc import RpcClient

logger = logging.getLogger(__name__)

INITIAL_BACKOFF = 0.5
MAX_BACKOFF = 12.0
MAX_WAIT = 5 * 60.0


def _optional_quantity(value: Any, name: str) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value, 16)
    except (TypeError, ValueError) as exc:
        raise TransportError(f"Malformed receipt field {name}: {value!r}") from exc


@dataclass(frozen=True)
class TransactionReceipt:
    tx_hash: str
    status: Optional[int]
    block_number: Optional[int]
    logs: tuple[dict, ...]
    raw: dict = field(repr=False, compare=False)

    @classmethod
    def from_rpc(cls, tx_hash: str, data: dict) -> "TransactionReceipt":
        logs = data.get("logs") or []
        if not isinstance(logs, list):
            raise TransportError(f"Malformed receipt logs for {tx_hash}")
        return cls(
            tx_hash=data.get("transactionHash") or tx_hash,
            status=_optional_quantity(data.get("status"), "status"),
            block_number=_optional_quantity(data.get("blockNumber"), "blockNumber"),
            logs=tuple(logs),
            raw=data,
        )

    @property
    def reverted(self) -> bool:
        """True when the call failed on-chain or had no observable effect."""
        return self.status == 0 or not self.logs


def backoff_schedule(
    initial: float = INITIAL_BACKOFF,
    cap: float = MAX_BACKOFF,
) -> Iterator[float]:
    """Yield ``initial``, doubling each time, never above ``cap``."""
    delay = initial
    while True:
        yield delay
        delay = min(delay * 2, cap)


def await_receipt(
    rpc: RpcClient,
    tx_hash: str,
    cancel: Optional[threading.Event] = None,
    max_wait: float = MAX_WAIT,
    initial_backoff: float = INITIAL_BACKOFF,
    max_backoff: float = MAX_BACKOFF,
    clock: Callable[[], float] = time.monotonic,
    sleep: Optional[Callable[[float], Any]] = None,
    log: Optional[logging.Logger] = None,
) -> Optional[TransactionReceipt]:
    """
    Wait for the receipt of ``tx_hash``.

    Args:
        rpc: RPC client
        tx_hash: Transaction hash
        cancel: Cancellation signal (default: the RPC client's)
        max_wait: Give up once this many seconds have passed since the first poll
        initial_backoff: First sleep between polls
        max_backoff: Upper bound for the sleep between polls
        clock: Monotonic clock in seconds
        sleep: Sleep function; by default the poller waits on ``cancel``
        log: Logger for progress messages

    Returns:
        The receipt, or None if none appeared within ``max_wait``

    Raises:
        TransportError: If a poll fails outright (not retried)
        OperationCancelled: If the cancellation signal is set while waiting
    """
    cancel = cancel if cancel is not None else rpc.cancel
    log = log or logger

    def _wait(delay: float) -> None:
        if sleep is None:
            if cancel.wait(delay):
                raise OperationCancelled(f"Cancelled while waiting for {tx_hash}")
            return
        sleep(delay)
        if cancel.is_set():
            raise OperationCancelled(f"Cancelled while waiting for {tx_hash}")

    start = clock()
    for delay in backoff_schedule(initial_backoff, max_backoff):
        data = rpc.get_transaction_receipt(tx_hash)
        if data is not None:
            receipt = TransactionReceipt.from_rpc(tx_hash, data)
            log.debug("receipt for %s found in block %s", tx_hash, receipt.block_number)
            return receipt

        elapsed = clock() - start
        if elapsed > max_wait:
            log.warning(
                "Unable to find transaction receipt for %s after %.0fs, stopping here",
                tx_hash,
                max_wait,
            )
            return None

        log.debug("no receipt for %s yet (%.1fs elapsed), retrying in %.1fs", tx_hash, elapsed, delay)
        _wait(delay)
