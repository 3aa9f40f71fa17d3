"""
Tests for receipt polling: backoff schedule, give-up ceiling, cancellation.
"""

from __future__ import annotations

import itertools
import threading
from typing import Optional

import pytest

from netpay.chain.receipt import TransactionReceipt, await_receipt, backoff_schedule
from netpay.errors import OperationCancelled, TransportError

TX_HASH = "0x" + "cd" * 32


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay


class StubRpc:
    """Answers receipt polls from a script; None means not mined yet."""

    def __init__(self, answers: list[Optional[dict]] = None, error: Exception = None) -> None:
        self.answers = list(answers or [])
        self.error = error
        self.polls = 0
        self.cancel = threading.Event()

    def get_transaction_receipt(self, tx_hash: str) -> Optional[dict]:
        self.polls += 1
        if self.error is not None:
            raise self.error
        return self.answers.pop(0) if self.answers else None


def _receipt(logs: list) -> dict:
    return {"transactionHash": TX_HASH, "status": "0x1", "blockNumber": "0x2a", "logs": logs}


class TestBackoffSchedule:
    def test_doubles_then_caps(self) -> None:
        delays = list(itertools.islice(backoff_schedule(), 9))
        assert delays == [0.5, 1, 2, 4, 8, 12, 12, 12, 12]


class TestAwaitReceipt:
    def test_found_after_retries(self) -> None:
        clock = FakeClock()
        rpc = StubRpc([None, None, _receipt([{"topics": []}])])

        receipt = await_receipt(rpc, TX_HASH, clock=clock, sleep=clock.sleep)

        assert receipt is not None
        assert receipt.block_number == 42
        assert receipt.status == 1
        assert not receipt.reverted
        assert rpc.polls == 3
        assert clock.sleeps == [0.5, 1]

    def test_gives_up_after_five_minutes(self) -> None:
        clock = FakeClock()
        rpc = StubRpc()

        receipt = await_receipt(rpc, TX_HASH, clock=clock, sleep=clock.sleep)

        assert receipt is None
        assert clock.sleeps[:6] == [0.5, 1, 2, 4, 8, 12]
        assert set(clock.sleeps[5:]) == {12}
        assert len(clock.sleeps) == 29
        assert rpc.polls == 30
        assert clock.now == pytest.approx(303.5)

    def test_transport_error_not_retried(self) -> None:
        clock = FakeClock()
        rpc = StubRpc(error=TransportError("eth_getTransactionReceipt: boom"))

        with pytest.raises(TransportError, match="boom"):
            await_receipt(rpc, TX_HASH, clock=clock, sleep=clock.sleep)

        assert rpc.polls == 1
        assert clock.sleeps == []

    def test_cancelled_while_sleeping(self) -> None:
        rpc = StubRpc()
        cancel = threading.Event()

        def sleep(delay: float) -> None:
            cancel.set()

        with pytest.raises(OperationCancelled):
            await_receipt(rpc, TX_HASH, cancel=cancel, sleep=sleep)
        assert rpc.polls == 1

    def test_cancel_interrupts_default_wait(self) -> None:
        rpc = StubRpc()
        rpc.cancel.set()

        with pytest.raises(OperationCancelled):
            await_receipt(rpc, TX_HASH)
        assert rpc.polls == 1


class TestTransactionReceipt:
    def test_no_logs_counts_as_reverted(self) -> None:
        assert TransactionReceipt.from_rpc(TX_HASH, _receipt([])).reverted

    def test_status_zero_counts_as_reverted(self) -> None:
        data = _receipt([{"topics": []}])
        data["status"] = "0x0"
        assert TransactionReceipt.from_rpc(TX_HASH, data).reverted

    def test_malformed_status(self) -> None:
        data = _receipt([])
        data["status"] = "pending"
        with pytest.raises(TransportError):
            TransactionReceipt.from_rpc(TX_HASH, data)
