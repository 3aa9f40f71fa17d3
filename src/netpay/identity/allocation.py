"""
Allocation identity generation.

Each allocation is identified by a disposable keypair. The staking contract
checks a proof that the allocation key endorsed the indexer: an EIP-191
personal signature over ``keccak256(indexer ++ allocation)`` laid out as
``r ++ s ++ v``.
"""

from __future__ import annotations

from dataclasses import dataclass

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_hash.auto import keccak
from eth_utils import to_canonical_address

from ..errors import IdentityError
from ..utils import normalize_address
from .keys import generate_eoa

PROOF_LEN = 65


@dataclass(frozen=True)
class AllocationIdentity:
    address: str
    proof: bytes
    message_hash: bytes

    @property
    def proof_hex(self) -> str:
        return "0x" + self.proof.hex()


def allocation_message_hash(indexer_address: str, allocation_address: str) -> bytes:
    """keccak256 over the raw 20-byte indexer and allocation addresses, unpadded."""
    return keccak(to_canonical_address(indexer_address) + to_canonical_address(allocation_address))


def invert_signature(v: int, r: int, s: int) -> bytes:
    """
    Lay a signature out as ``r ++ s ++ v`` with ``v`` in {27, 28}.

    Signers that report the bare recovery id (0/1) are shifted into the
    form the on-chain verifier recovers with.
    """
    if v < 27:
        v += 27
    if v not in (27, 28):
        raise IdentityError(f"Unexpected signature recovery value {v}")
    return r.to_bytes(32, "big") + s.to_bytes(32, "big") + bytes([v])


def recover_proof_signer(message_hash: bytes, proof: bytes) -> str:
    """Recover the address that produced ``proof`` over ``message_hash``."""
    signable = encode_defunct(primitive=message_hash)
    return Account.recover_message(signable, signature=proof)


def generate_allocation_identity(indexer_address: str) -> AllocationIdentity:
    """
    Create a fresh allocation key and its proof for ``indexer_address``.

    The proof is verified locally before it is returned; a proof the
    contract would reject never leaves this function.

    Raises:
        InputError: If the indexer address is malformed
        IdentityError: If key generation, signing or self-verification fails
    """
    indexer_address = normalize_address(indexer_address, "indexer address")

    try:
        private_key, allocation_address = generate_eoa()
        message_hash = allocation_message_hash(indexer_address, allocation_address)
        signed = Account.sign_message(encode_defunct(primitive=message_hash), private_key)
    except Exception as exc:
        raise IdentityError(f"Failed to sign allocation proof: {exc}") from exc

    proof = invert_signature(signed.v, signed.r, signed.s)

    try:
        recovered = recover_proof_signer(message_hash, proof)
    except Exception as exc:
        raise IdentityError(f"Failed to recover allocation proof signer: {exc}") from exc

    if to_canonical_address(recovered) != to_canonical_address(allocation_address):
        raise IdentityError("Recovered address does not match allocation ID")

    return AllocationIdentity(
        address=allocation_address,
        proof=proof,
        message_hash=message_hash,
    )
