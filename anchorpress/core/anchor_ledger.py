"""Append-only, hash-chained anchor ledger backed by SQLite.

Local stand-in for a public ledger anchor contract.

Design:
- Append-only: only ``anchor()`` writes; no update, no delete.
- Hash-chained: each entry seals the previous entry's hash, so rewriting
  history is detectable with ``verify_chain()``.
- Each accepted anchor occupies its own block; ``confirmed_at_block`` is the
  chain height and ``transaction_ref`` is ``0x`` + the entry hash.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any

from anchorpress.core.errors import (
    AnchorNotFound,
    AnchorRejected,
    LedgerIntegrityError,
    TransientNetworkError,
)
from anchorpress.core.hasher import compute_entry_hash
from anchorpress.models.anchors import AnchorReceipt, AnchorRecord

logger = logging.getLogger(__name__)

_CREATE_ANCHORS = """
CREATE TABLE IF NOT EXISTS anchors (
    document_id    INTEGER PRIMARY KEY,
    cid            TEXT NOT NULL,
    name           TEXT NOT NULL,
    timestamp      INTEGER NOT NULL,
    anchored_by    TEXT NOT NULL DEFAULT '',
    previous_hash  TEXT NOT NULL DEFAULT '',
    entry_hash     TEXT NOT NULL UNIQUE
);
"""

_CREATE_IDX_CID = """
CREATE INDEX IF NOT EXISTS idx_anchor_cid ON anchors(cid, document_id);
"""

_COLUMNS = "document_id, cid, name, timestamp, anchored_by, previous_hash, entry_hash"


class AnchorLedger:
    """Append-only anchor ledger satisfying the ``Ledger`` protocol.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    anchored_by:
        Identity recorded as the submitter of every anchor.
    """

    def __init__(self, db_path: Path | str, *, anchored_by: str = "anchorpress") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._anchored_by = anchored_by
        self._write_lock = threading.Lock()
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
            conn.execute("PRAGMA journal_mode=WAL")
        except sqlite3.Error as exc:
            raise TransientNetworkError(f"Ledger unavailable: {exc}") from exc
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(_CREATE_ANCHORS)
            conn.execute(_CREATE_IDX_CID)
            conn.commit()

    # ------------------------------------------------------------------
    # Core: append-only write
    # ------------------------------------------------------------------

    def anchor(self, name: str, cid: str, timestamp: int) -> AnchorReceipt:
        """Append an anchor for *cid* and return its receipt.

        Raises
        ------
        AnchorRejected
            If the submission is malformed (empty name or CID, non-positive
            timestamp).
        """
        if not name or not name.strip():
            raise AnchorRejected("Anchor rejected: name must not be empty")
        if not cid or not cid.strip():
            raise AnchorRejected("Anchor rejected: cid must not be empty")
        if int(timestamp) <= 0:
            raise AnchorRejected(f"Anchor rejected: invalid timestamp {timestamp!r}")

        with self._write_lock, self._connect() as conn:
            row = conn.execute(
                "SELECT document_id, entry_hash FROM anchors ORDER BY document_id DESC LIMIT 1"
            ).fetchone()
            document_id = (row[0] + 1) if row else 1
            previous_hash = row[1] if row else ""

            entry = {
                "document_id": document_id,
                "cid": cid,
                "name": name,
                "timestamp": int(timestamp),
                "anchored_by": self._anchored_by,
                "previous_hash": previous_hash,
            }
            entry_hash = compute_entry_hash(entry)
            try:
                conn.execute(
                    f"INSERT INTO anchors ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (
                        document_id,
                        cid,
                        name,
                        int(timestamp),
                        self._anchored_by,
                        previous_hash,
                        entry_hash,
                    ),
                )
                conn.commit()
            except sqlite3.IntegrityError as exc:
                raise AnchorRejected(f"Anchor reverted: {exc}") from exc

        logger.info("Anchored %s as document %d (block %d)", cid, document_id, document_id)
        return AnchorReceipt(
            document_id=document_id,
            transaction_ref=f"0x{entry_hash}",
            confirmed_at_block=document_id,
        )

    # ------------------------------------------------------------------
    # Query methods (read-only)
    # ------------------------------------------------------------------

    def lookup_by_cid(self, cid: str) -> AnchorRecord | None:
        """Return the most recent anchor of *cid*, or ``None``."""
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM anchors WHERE cid = ? "
                "ORDER BY document_id DESC LIMIT 1",
                (cid,),
            ).fetchone()
        return self._row_to_record(row) if row else None

    def lookup_by_id(self, document_id: int) -> AnchorRecord:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM anchors WHERE document_id = ?",
                (int(document_id),),
            ).fetchone()
        if row is None:
            raise AnchorNotFound(f"No anchored document with id {document_id}")
        return self._row_to_record(row)

    def history(self, cid: str) -> list[AnchorRecord]:
        """Return every anchor of *cid*, oldest first."""
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM anchors WHERE cid = ? ORDER BY document_id ASC",
                (cid,),
            ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def count(self) -> int:
        with self._connect() as conn:
            (total,) = conn.execute("SELECT COUNT(*) FROM anchors").fetchone()
        return int(total)

    # ------------------------------------------------------------------
    # Chain verification
    # ------------------------------------------------------------------

    def verify_chain(self) -> bool:
        """Walk all anchors in order and verify every hash link.

        Returns True if the chain is valid, raises LedgerIntegrityError
        otherwise.
        """
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM anchors ORDER BY document_id ASC"
            ).fetchall()

        prev_hash = ""
        for row in rows:
            entry = self._row_to_dict(row)
            if entry["previous_hash"] != prev_hash:
                raise LedgerIntegrityError(
                    f"Chain broken at document {entry['document_id']}: "
                    f"expected previous_hash={prev_hash!r}, "
                    f"got {entry['previous_hash']!r}"
                )
            expected_hash = compute_entry_hash(entry)
            if entry["entry_hash"] != expected_hash:
                raise LedgerIntegrityError(
                    f"Tampered document {entry['document_id']}: "
                    f"expected hash={expected_hash!r}, "
                    f"got {entry['entry_hash']!r}"
                )
            prev_hash = entry["entry_hash"]

        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_dict(row: tuple) -> dict[str, Any]:
        document_id, cid, name, timestamp, anchored_by, previous_hash, entry_hash = row
        return {
            "document_id": document_id,
            "cid": cid,
            "name": name,
            "timestamp": timestamp,
            "anchored_by": anchored_by,
            "previous_hash": previous_hash,
            "entry_hash": entry_hash,
        }

    @classmethod
    def _row_to_record(cls, row: tuple) -> AnchorRecord:
        entry = cls._row_to_dict(row)
        return AnchorRecord(
            document_id=entry["document_id"],
            cid=entry["cid"],
            name=entry["name"],
            timestamp=entry["timestamp"],
            transaction_ref=f"0x{entry['entry_hash']}",
            confirmed_at_block=entry["document_id"],
            anchored_by=entry["anchored_by"],
        )
