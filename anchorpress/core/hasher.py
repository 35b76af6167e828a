"""Canonical hashing helpers and content identifiers.

Content identifiers produced here are CIDv1 strings (raw codec, sha2-256
multihash, base32 multibase), the same identifier an IPFS node assigns to a
single raw block, so locally stored content and gateway URLs line up.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
from typing import Any

# CIDv1 prefix: version 1, raw codec (0x55), sha2-256 (0x12), 32-byte digest
_CID_V1_RAW_SHA256_PREFIX = bytes([0x01, 0x55, 0x12, 0x20])
_MULTIBASE_BASE32 = "b"


class InvalidCIDError(ValueError):
    """Raised when a string is not a CID in the supported format."""


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes — deterministic, sorted, compact."""
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def digests_match(expected: str, actual: str) -> bool:
    """Compare two hex digests in constant time."""
    return hmac.compare_digest(expected.lower(), actual.lower())


def compute_cid(data: bytes) -> str:
    """Derive the content identifier for *data*.

    Identical bytes always yield the identical CID.
    """
    multihash = _CID_V1_RAW_SHA256_PREFIX + hashlib.sha256(data).digest()
    encoded = base64.b32encode(multihash).decode("ascii").rstrip("=").lower()
    return f"{_MULTIBASE_BASE32}{encoded}"


def cid_to_digest(cid: str) -> str:
    """Extract the SHA-256 hex digest embedded in a CID.

    Raises
    ------
    InvalidCIDError
        If *cid* is not a base32 CIDv1 with a raw sha2-256 multihash.
    """
    if not cid or not cid.startswith(_MULTIBASE_BASE32):
        raise InvalidCIDError(f"Unsupported CID encoding: {cid!r}")

    body = cid[1:].upper()
    body += "=" * (-len(body) % 8)
    try:
        raw = base64.b32decode(body)
    except ValueError as exc:
        raise InvalidCIDError(f"Malformed CID: {cid!r}") from exc

    prefix_len = len(_CID_V1_RAW_SHA256_PREFIX)
    if raw[:prefix_len] != _CID_V1_RAW_SHA256_PREFIX or len(raw) != prefix_len + 32:
        raise InvalidCIDError(f"CID is not a raw sha2-256 CIDv1: {cid!r}")
    return raw[prefix_len:].hex()


def is_supported_cid(cid: str) -> bool:
    """Return ``True`` if *cid* can be decoded by :func:`cid_to_digest`."""
    try:
        cid_to_digest(cid)
    except InvalidCIDError:
        return False
    return True


def compute_entry_hash(entry_dict: dict[str, Any]) -> str:
    """SHA-256 of a ledger entry (excluding the entry_hash field itself).

    This is the seal that makes each anchor entry tamper-evident.
    """
    d = {k: v for k, v in entry_dict.items() if k != "entry_hash"}
    return sha256_hex(canonical_json_bytes(d))
