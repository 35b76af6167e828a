"""Ledger anchor models — append-only proof of existence."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class AnchorReceipt(BaseModel):
    """Returned by the ledger when an anchor submission is accepted."""

    model_config = ConfigDict(frozen=True)

    document_id: int
    transaction_ref: str
    confirmed_at_block: int


class AnchorRecord(BaseModel):
    """A ledger entry binding a name and CID to a point in time.

    Created once per accepted anchor and never modified; the ledger
    enforces append-only semantics.
    """

    model_config = ConfigDict(frozen=True)

    document_id: int
    cid: str
    name: str
    timestamp: int  # seconds since epoch, supplied by the anchoring caller
    transaction_ref: str
    confirmed_at_block: int
    anchored_by: str = ""

    @classmethod
    def from_receipt(
        cls, receipt: AnchorReceipt, *, name: str, cid: str, timestamp: int
    ) -> AnchorRecord:
        """Build a record from a receipt when the ledger cannot yet be read back."""
        return cls(
            document_id=receipt.document_id,
            cid=cid,
            name=name,
            timestamp=timestamp,
            transaction_ref=receipt.transaction_ref,
            confirmed_at_block=receipt.confirmed_at_block,
        )
