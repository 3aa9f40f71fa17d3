"""
Error kinds for the payment pipeline.

Every error raised by netpay derives from ``NetpayError`` and carries the
process exit code the CLI uses when it reaches the top level.
"""

from __future__ import annotations

from typing import Optional


class NetpayError(RuntimeError):
    exit_code: int = 1
    tx_hash: Optional[str] = None


class InputError(NetpayError):
    """Malformed or missing argument / credential. Raised before any network access."""

    exit_code = 2


class IdentityError(NetpayError):
    """Allocation proof could not be generated or failed self-verification."""

    exit_code = 3


class TransportError(NetpayError):
    """An RPC request failed outright (network, HTTP status, JSON-RPC error, bad result)."""

    exit_code = 4

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        tx_hash: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.tx_hash = tx_hash


class TransactionError(NetpayError):
    """Base for outcomes of a transaction that was broadcast."""

    def __init__(self, message: str, tx_hash: str) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash


class UnconfirmedError(TransactionError):
    """Broadcast succeeded but no receipt appeared in time. The outcome is unknown."""

    exit_code = 5


class RevertedError(TransactionError):
    """Receipt found but the call reverted or emitted no logs."""

    exit_code = 6


class OperationCancelled(NetpayError):
    """Cancellation observed. ``tx_hash`` is set when a broadcast may still land."""

    exit_code = 130

    def __init__(self, message: str, tx_hash: Optional[str] = None) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash
