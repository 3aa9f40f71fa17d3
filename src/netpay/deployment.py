"""
Placeholder deployments.

Payments need a deployment with no curation signal. When the operator has
none, a unique manifest is uploaded to IPFS and its hash is used as the
deployment id.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

import httpx

from .errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_IPFS_URL = "https://api.thegraph.com/ipfs/api/v0/add"

MANIFEST_TEMPLATE = """specVersion: 0.0.5
description: "thegraph.market Payment Gateway usage"
usage:
  uid: {uid}
"""


def build_manifest(uid: Optional[str] = None) -> bytes:
    return MANIFEST_TEMPLATE.format(uid=uid or str(uuid.uuid1())).encode("utf-8")


def upload_file(
    contents: bytes,
    ipfs_url: str = DEFAULT_IPFS_URL,
    filename: str = "manifest.yaml",
    timeout: float = 30.0,
    transport: Optional[httpx.BaseTransport] = None,
) -> str:
    """
    Upload a file to the IPFS add endpoint.

    Returns:
        The IPFS hash of the uploaded file

    Raises:
        TransportError: If the upload fails or the response has no hash
    """
    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            response = client.post(ipfs_url, files={"file": (filename, contents)})
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPError as exc:
        raise TransportError(f"IPFS upload failed: {exc}") from exc
    except ValueError as exc:
        raise TransportError(f"IPFS upload returned invalid JSON: {exc}") from exc

    ipfs_hash = data.get("Hash") if isinstance(data, dict) else None
    if not ipfs_hash:
        raise TransportError(f"IPFS upload response has no Hash: {data!r}")

    logger.debug("uploaded %s as %s", filename, ipfs_hash)
    return ipfs_hash


def generate_deployment(
    ipfs_url: str = DEFAULT_IPFS_URL,
    transport: Optional[httpx.BaseTransport] = None,
) -> str:
    """Upload a fresh placeholder manifest and return its deployment id."""
    return upload_file(build_manifest(), ipfs_url=ipfs_url, transport=transport)
