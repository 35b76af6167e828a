"""SQLite-backed pin registry — local stand-in for a remote pinning service.

A pin is a request to retain a CID beyond the store's garbage-collection
horizon. When a content store is attached, pinning a CID the store does not
hold is recorded as ``pending`` (the service would still be searching for
the content); otherwise pins are recorded as ``pinned`` immediately.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from anchorpress.core.capabilities import ContentStore
from anchorpress.core.errors import TransientNetworkError
from anchorpress.models.artifacts import PinRecord, PinStatus

logger = logging.getLogger(__name__)

_CREATE_PINS = """
CREATE TABLE IF NOT EXISTS pins (
    cid           TEXT PRIMARY KEY,
    status        TEXT NOT NULL,
    pinned_at     TEXT NOT NULL,
    metadata_json TEXT NOT NULL DEFAULT '{}'
);
"""


class LocalPinRegistry:
    """Pin registry satisfying the ``PinningService`` protocol.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    content_store:
        Optional store consulted to decide between ``pinned`` and
        ``pending``.
    """

    def __init__(
        self, db_path: Path | str, content_store: ContentStore | None = None
    ) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._content_store = content_store
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        try:
            return sqlite3.connect(str(self._db_path), check_same_thread=False)
        except sqlite3.Error as exc:
            raise TransientNetworkError(f"Pin registry unavailable: {exc}") from exc

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(_CREATE_PINS)
            conn.commit()

    def _content_present(self, cid: str) -> bool:
        if self._content_store is None:
            return True
        exists = getattr(self._content_store, "exists", None)
        if exists is not None:
            return bool(exists(cid))
        try:
            self._content_store.get(cid)
        except Exception:  # noqa: BLE001 - any failure means "not retrievable now"
            return False
        return True

    # ------------------------------------------------------------------
    # PinningService protocol
    # ------------------------------------------------------------------

    def pin(self, cid: str, metadata: dict[str, str]) -> PinRecord:
        """Pin *cid*, keeping the original ``pinned_at`` on re-pin."""
        status = PinStatus.PINNED if self._content_present(cid) else PinStatus.PENDING
        existing = self.status(cid)
        pinned_at = (
            existing.pinned_at
            if existing is not None and existing.is_pinned
            else datetime.now(timezone.utc)
        )
        record = PinRecord(
            cid=cid,
            status=status,
            pinned_at=pinned_at,
            metadata={str(k): str(v) for k, v in metadata.items()},
        )
        self._upsert(record)
        logger.info("Pin %s recorded as %s", cid, status.value)
        return record

    def status(self, cid: str) -> PinRecord | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT cid, status, pinned_at, metadata_json FROM pins WHERE cid = ?",
                (cid,),
            ).fetchone()
        return self._row_to_record(row) if row else None

    # ------------------------------------------------------------------
    # Registry management
    # ------------------------------------------------------------------

    def unpin(self, cid: str) -> PinRecord | None:
        """Mark *cid* as unpinned. Returns the updated record, if any."""
        existing = self.status(cid)
        if existing is None:
            return None
        record = existing.model_copy(update={"status": PinStatus.UNPINNED})
        self._upsert(record)
        logger.info("Pin %s released", cid)
        return record

    def list_pins(self, status: PinStatus | None = None) -> list[PinRecord]:
        """Return all pin records, optionally filtered by status."""
        query = "SELECT cid, status, pinned_at, metadata_json FROM pins"
        params: tuple[str, ...] = ()
        if status is not None:
            query += " WHERE status = ?"
            params = (status.value,)
        query += " ORDER BY pinned_at ASC"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_record(row) for row in rows]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _upsert(self, record: PinRecord) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO pins (cid, status, pinned_at, metadata_json)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(cid) DO UPDATE SET
                    status = excluded.status,
                    pinned_at = excluded.pinned_at,
                    metadata_json = excluded.metadata_json
                """,
                (
                    record.cid,
                    record.status.value,
                    record.pinned_at.isoformat(),
                    json.dumps(record.metadata, sort_keys=True),
                ),
            )
            conn.commit()

    @staticmethod
    def _row_to_record(row: tuple) -> PinRecord:
        cid, status, pinned_at, metadata_json = row
        return PinRecord(
            cid=cid,
            status=PinStatus(status),
            pinned_at=pinned_at,
            metadata=json.loads(metadata_json),
        )
