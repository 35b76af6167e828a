"""Filesystem-backed content-addressed store.

Storage layout: {base_path}/{sha256[0:2]}/{sha256[2:4]}/{sha256}.dat
No delete method — content is immutable once stored. Objects are addressed
by CID; the SHA-256 digest embedded in the CID picks the file.
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path

from anchorpress.core.errors import ContentNotFound, TransientNetworkError
from anchorpress.core.hasher import (
    InvalidCIDError,
    cid_to_digest,
    compute_cid,
    sha256_hex,
)

logger = logging.getLogger(__name__)


class LocalContentStore:
    """SHA-256 keyed, immutable content store satisfying ``ContentStore``.

    Storing the same content twice is a no-op (idempotent). There is no
    update or delete.

    Parameters
    ----------
    base_path:
        Root directory for object storage.
    """

    def __init__(self, base_path: Path | str) -> None:
        self._base = Path(base_path)
        self._base.mkdir(parents=True, exist_ok=True)

    def _object_path(self, sha256_digest: str) -> Path:
        return self._base / sha256_digest[:2] / sha256_digest[2:4] / f"{sha256_digest}.dat"

    def _path_for_cid(self, cid: str) -> Path:
        try:
            return self._object_path(cid_to_digest(cid))
        except InvalidCIDError as exc:
            raise ContentNotFound(f"Not a CID held by this store: {cid!r}") from exc

    # ------------------------------------------------------------------
    # ContentStore protocol
    # ------------------------------------------------------------------

    def put(self, data: bytes) -> tuple[str, int]:
        """Store *data* and return ``(cid, size)``."""
        cid = compute_cid(data)
        path = self._object_path(sha256_hex(data))
        try:
            if not path.exists():
                path.parent.mkdir(parents=True, exist_ok=True)
                tmp = path.with_name(f"{path.name}.{uuid.uuid4().hex}.tmp")
                tmp.write_bytes(data)
                tmp.replace(path)
                logger.debug("Stored %d bytes as %s", len(data), cid)
        except OSError as exc:
            raise TransientNetworkError(f"Content store write failed: {exc}") from exc
        return cid, len(data)

    def get(self, cid: str) -> bytes:
        """Return the bytes stored under *cid*."""
        path = self._path_for_cid(cid)
        if not path.exists():
            raise ContentNotFound(f"Content not found: {cid}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise TransientNetworkError(f"Content store read failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Check and verify
    # ------------------------------------------------------------------

    def exists(self, cid: str) -> bool:
        """Check if *cid* is held by the store."""
        try:
            return self._path_for_cid(cid).exists()
        except ContentNotFound:
            return False

    def verify(self, cid: str) -> bool:
        """Re-hash stored data and compare against the CID.

        Returns True if the stored bytes match the expected hash.
        """
        try:
            path = self._path_for_cid(cid)
        except ContentNotFound:
            return False
        if not path.exists():
            return False
        return compute_cid(path.read_bytes()) == cid
