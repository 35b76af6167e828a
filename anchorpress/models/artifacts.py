"""Artifact, upload and pin models (immutable)."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Artifact(BaseModel):
    """A logical document to publish.

    ``name`` is a human label and need not be unique. The payload is frozen
    with the model, so it cannot change once an upload has begun.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    content: bytes = Field(repr=False)
    metadata: dict[str, Any] = {}

    @classmethod
    def from_path(
        cls,
        path: Path | str,
        *,
        name: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Artifact:
        """Read *path* into an Artifact, defaulting the name to the file name."""
        path = Path(path)
        return cls(
            name=name or path.name,
            content=path.read_bytes(),
            metadata=metadata or {},
        )

    @property
    def size(self) -> int:
        return len(self.content)


class UploadResult(BaseModel):
    """What the content store returned, plus the digest taken before upload.

    ``local_digest`` must equal the digest of any later retrieval of ``cid``.
    """

    model_config = ConfigDict(frozen=True)

    cid: str
    size: int
    local_digest: str  # SHA-256 hex of the bytes as handed to the store


class PinStatus(str, Enum):
    """Pinning service view of a CID."""

    PINNED = "pinned"
    PENDING = "pending"
    UNPINNED = "unpinned"


class PinRecord(BaseModel):
    """A pinning service record. Read-only to the pipeline."""

    model_config = ConfigDict(frozen=True)

    cid: str
    status: PinStatus
    pinned_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    metadata: dict[str, str] = {}

    @property
    def is_pinned(self) -> bool:
        return self.status == PinStatus.PINNED
