from __future__ import annotations

import base58
from eth_utils import is_hex_address, to_checksum_address

from .errors import InputError

TOKEN_DECIMALS = 18
_BASE_UNIT = 10**TOKEN_DECIMALS

# sha2-256 multihash: 0x12 (code) 0x20 (digest length) + 32-byte digest
MULTIHASH_HEADER_LEN = 2
MULTIHASH_LEN = 34


def to_base_units(amount: int) -> int:
    """Scale a whole-token amount to base units (10^18). Integer arithmetic only."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InputError(f"Token amount must be an integer, got {amount!r}")
    if amount < 0:
        raise InputError(f"Token amount must not be negative, got {amount}")
    return amount * _BASE_UNIT


def normalize_address(address: str, name: str = "address") -> str:
    """Validate a 0x-prefixed 20-byte hex address and return its checksummed form."""
    if not isinstance(address, str) or not is_hex_address(address.strip().lower()):
        raise InputError(f"Invalid {name} {address!r}")
    return to_checksum_address(address.strip().lower())


def content_id_to_bytes(content_id: str) -> bytes:
    """
    Convert a content identifier to the digest the contracts expect.

    Accepts a base58 multihash (``Qm...``) or a 0x-prefixed hex digest. When
    the decoded value is a 34-byte multihash, the multicodec and length
    prefix are stripped; any other length is returned unchanged.

    Raises:
        InputError: If the identifier cannot be decoded
    """
    if not isinstance(content_id, str) or not content_id.strip():
        raise InputError("Content identifier must be a non-empty string")

    value = content_id.strip()
    if value.startswith("0x"):
        try:
            decoded = bytes.fromhex(value[2:])
        except ValueError as exc:
            raise InputError(f"Invalid hex content identifier {value!r}") from exc
    else:
        try:
            decoded = base58.b58decode(value)
        except ValueError as exc:
            raise InputError(f"Invalid base58 content identifier {value!r}: {exc}") from exc

    if not decoded:
        raise InputError(f"Content identifier {value!r} decodes to nothing")

    if len(decoded) == MULTIHASH_LEN:
        decoded = decoded[MULTIHASH_HEADER_LEN:]

    return decoded

