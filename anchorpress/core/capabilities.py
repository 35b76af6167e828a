"""External capability protocols consumed by the publisher and verifier.

Any object with the right methods satisfies these protocols; SDK-backed
adapters (IPFS HTTP client, Pinata, an Ethereum anchor contract) plug in
without inheriting from anything. The local reference adapters live in
``content_store``, ``pinning`` and ``anchor_ledger``.

Adapters own timeout policy. A timeout or connection failure must surface
as ``TransientNetworkError``, never as a silent hang.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from anchorpress.models.anchors import AnchorReceipt, AnchorRecord
from anchorpress.models.artifacts import PinRecord


@runtime_checkable
class ContentStore(Protocol):
    """Content-addressed byte storage."""

    def put(self, data: bytes) -> tuple[str, int]:
        """Store *data* and return ``(cid, size)``.

        Raises ``TransientNetworkError`` if the store is unreachable.
        """
        ...

    def get(self, cid: str) -> bytes:
        """Return the bytes stored under *cid*.

        Raises ``ContentNotFound`` if the store does not hold *cid* and
        ``TransientNetworkError`` if it cannot be reached.
        """
        ...


@runtime_checkable
class PinningService(Protocol):
    """Durable retention of CIDs beyond the store's garbage collection."""

    def pin(self, cid: str, metadata: dict[str, str]) -> PinRecord:
        """Request durable retention of *cid*, tagged with *metadata*."""
        ...

    def status(self, cid: str) -> PinRecord | None:
        """Return the current pin record for *cid*, or ``None`` if unknown."""
        ...


@runtime_checkable
class Ledger(Protocol):
    """Append-only public ledger of anchors."""

    def anchor(self, name: str, cid: str, timestamp: int) -> AnchorReceipt:
        """Submit an anchor. Raises ``AnchorRejected`` on rejection or revert."""
        ...

    def lookup_by_cid(self, cid: str) -> AnchorRecord | None:
        """Return the anchor for *cid*, or ``None`` if the ledger has none."""
        ...

    def lookup_by_id(self, document_id: int) -> AnchorRecord:
        """Return the anchor with *document_id*. Raises ``AnchorNotFound``."""
        ...
