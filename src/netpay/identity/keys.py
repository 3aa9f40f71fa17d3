"""
ECDSA / secp256k1 key handling for netpay.

The operator key signs every transaction the tool sends. It is read once per
invocation from ``--private-key-file`` or from ``NETWORK_PAYMENT_PRIVATE_KEY``
(optionally populated from ``~/.netpay/.env``) and is never written back.
"""

from __future__ import annotations

import os
import secrets
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..errors import InputError

NETPAY_DIR = Path.home() / ".netpay"
NETPAY_ENV = NETPAY_DIR / ".env"
PRIVATE_KEY_ENV_VAR = "NETWORK_PAYMENT_PRIVATE_KEY"


def generate_eoa() -> tuple[str, str]:
    """
    Generate a new ECDSA/secp256k1 keypair.

    Returns:
        Tuple of (private_key_hex, address)
    """
    private_key = "0x" + secrets.token_hex(32)
    account = Account.from_key(private_key)
    return private_key, account.address


def _normalize_private_key(value: str, source: str) -> str:
    key = value.strip()
    if key.startswith(("0x", "0X")):
        key = key[2:]
    if len(key) != 64:
        raise InputError(f"Private key from {source} must be 32 bytes of hex")
    try:
        bytes.fromhex(key)
    except ValueError as exc:
        raise InputError(f"Private key from {source} is not valid hex") from exc
    return "0x" + key.lower()


def load_private_key(
    key_file: Optional[Path] = None,
    env_path: Optional[Path] = None,
) -> str:
    """
    Load the operator private key.

    Args:
        key_file: File holding the hex key. Takes precedence when given.
        env_path: .env file to load before reading the environment
                  (default: ~/.netpay/.env)

    Returns:
        0x-prefixed hex private key

    Raises:
        InputError: If no key is configured or it is malformed
    """
    if key_file is not None:
        try:
            content = Path(key_file).read_text(encoding="utf-8")
        except OSError as exc:
            raise InputError(f"Cannot read private key file {key_file}: {exc}") from exc
        return _normalize_private_key(content, str(key_file))

    env_path = env_path or NETPAY_ENV
    if env_path.exists():
        load_dotenv(env_path, override=False)

    private_key = os.environ.get(PRIVATE_KEY_ENV_VAR)
    if not private_key:
        raise InputError(
            f"Private key is required, either through the {PRIVATE_KEY_ENV_VAR} "
            f"environment variable or --private-key-file"
        )
    return _normalize_private_key(private_key, PRIVATE_KEY_ENV_VAR)


def get_account(private_key: str) -> LocalAccount:
    """Get an eth-account LocalAccount from a 0x-prefixed hex private key."""
    return Account.from_key(private_key)


def get_address(private_key: str) -> str:
    """Checksummed address for a private key."""
    return get_account(private_key).address
