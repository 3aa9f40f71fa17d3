"""
Transaction Builder - Build, sign, send and confirm contract calls.

Uses eth-account for signing and the httpx-based JSON-RPC client for sending.
A transaction is built once per submission with a freshly fetched nonce; a
failed submission is never retried here, since resending with a stale nonce
is unsafe.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from eth_account.signers.local import LocalAccount

from ..errors import InputError, OperationCancelled, RevertedError, TransportError, UnconfirmedError
from ..utils import normalize_address
from .abi import ContractCall
from .receipt import TransactionReceipt, await_receipt

if TYPE_CHECKING:
    from ..config import Invocation

GAS_LIMIT_DEFAULT = 7_000_000
GAS_LIMIT_COLLECT = 5_000_000


@dataclass(frozen=True)
class SignedTransaction:
    nonce: int
    to: str
    value: int
    gas_limit: int
    gas_price: int
    chain_id: int
    data: bytes
    raw: bytes
    hash: str

    @property
    def raw_hex(self) -> str:
        return "0x" + self.raw.hex()


def sign_transaction(
    account: LocalAccount,
    chain_id: int,
    nonce: int,
    to: str,
    call: ContractCall,
    gas_limit: int,
    gas_price: int,
) -> SignedTransaction:
    """
    Sign a legacy (EIP-155) contract call transaction with zero value.

    Raises:
        InputError: If the transaction fields are rejected by the signer
    """
    to = normalize_address(to, "contract address")
    tx: dict[str, Any] = {
        "to": to,
        "data": call.data_hex,
        "value": 0,
        "nonce": nonce,
        "gas": gas_limit,
        "gasPrice": gas_price,
        "chainId": chain_id,
    }

    try:
        signed = account.sign_transaction(tx)
    except Exception as exc:
        raise InputError(f"Unable to sign transaction: {exc}") from exc

    return SignedTransaction(
        nonce=nonce,
        to=to,
        value=0,
        gas_limit=gas_limit,
        gas_price=gas_price,
        chain_id=chain_id,
        data=call.data,
        raw=bytes(signed.raw_transaction),
        hash="0x" + bytes(signed.hash).hex(),
    )


def submit(
    invocation: "Invocation",
    to: str,
    call: ContractCall,
    gas_limit: int = GAS_LIMIT_DEFAULT,
) -> str:
    """
    Build, sign and broadcast a contract call from the invocation's account.

    Args:
        invocation: Per-run configuration (RPC, account, gas price override)
        to: Contract address
        call: Encoded contract call
        gas_limit: Fixed gas limit for this call type

    Returns:
        Transaction hash (0x-prefixed hex) as reported by the node

    Raises:
        TransportError: If fetching nonce, gas price or chain id, or the broadcast fails
    """
    rpc = invocation.rpc
    log = invocation.logger

    nonce = rpc.get_nonce(invocation.sender)
    if invocation.gas_price:
        gas_price = invocation.gas_price
    else:
        gas_price = rpc.get_gas_price()
    chain_id = rpc.get_chain_id()

    signed = sign_transaction(
        invocation.account,
        chain_id=chain_id,
        nonce=nonce,
        to=to,
        call=call,
        gas_limit=gas_limit,
        gas_price=gas_price,
    )
    log.info(
        "sending %s to %s nonce=%d gas=%d gasPrice=%d",
        call.signature,
        signed.to,
        nonce,
        gas_limit,
        gas_price,
    )

    tx_hash = rpc.send_raw_transaction(signed.raw_hex)
    if tx_hash.lower() != signed.hash.lower():
        log.warning("node reported hash %s for locally signed %s", tx_hash, signed.hash)
    log.info("transaction sent: %s", tx_hash)
    return tx_hash


def send_and_confirm(
    invocation: "Invocation",
    to: str,
    call: ContractCall,
    action: str,
    gas_limit: int = GAS_LIMIT_DEFAULT,
    **poll_options: Any,
) -> tuple[str, TransactionReceipt]:
    """
    Submit a call and wait for its receipt.

    Args:
        invocation: Per-run configuration
        to: Contract address
        call: Encoded contract call
        action: Short name of the step, used in error messages
        gas_limit: Fixed gas limit for this call type
        **poll_options: Passed through to ``await_receipt``

    Returns:
        (tx_hash, receipt) for a confirmed transaction that emitted logs

    Raises:
        TransportError: Submission or polling failed outright
        UnconfirmedError: No receipt within the polling ceiling (unknown outcome)
        RevertedError: Receipt found with status 0 or no logs
        OperationCancelled: Cancelled or interrupted after the broadcast; carries the hash
    """
    try:
        tx_hash = submit(invocation, to, call, gas_limit=gas_limit)
    except TransportError as exc:
        raise TransportError(f"{action}: {exc}", code=exc.code) from exc

    try:
        receipt: Optional[TransactionReceipt] = await_receipt(
            invocation.rpc,
            tx_hash,
            cancel=invocation.cancel,
            log=invocation.logger,
            **poll_options,
        )
    except TransportError as exc:
        raise TransportError(f"{action}: {exc}", code=exc.code, tx_hash=tx_hash) from exc
    except (OperationCancelled, KeyboardInterrupt) as exc:
        raise OperationCancelled(
            f"{action}: cancelled while waiting for transaction {tx_hash}, outcome unknown",
            tx_hash=tx_hash,
        ) from exc

    if receipt is None:
        raise UnconfirmedError(
            f"{action}: no receipt found for transaction {tx_hash}, outcome unknown",
            tx_hash,
        )
    if receipt.reverted:
        raise RevertedError(f"{action}: no logs found for transaction {tx_hash}", tx_hash)

    return tx_hash, receipt
