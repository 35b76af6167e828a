"""Publication outcomes, resumable checkpoints and the session manifest."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from anchorpress.models.anchors import AnchorReceipt, AnchorRecord
from anchorpress.models.artifacts import PinRecord, UploadResult
from anchorpress.models.stages import PipelineStage


class PublicationIssue(BaseModel):
    """A non-fatal degradation recorded on an otherwise successful publication."""

    model_config = ConfigDict(frozen=True)

    kind: str  # "PinningDegraded" or "NotYetConfirmed"
    stage: PipelineStage
    message: str


class PipelineCheckpoint(BaseModel):
    """Everything a publication run obtained before it stopped.

    Passing a checkpoint back to ``Publisher.publish(resume_from=...)``
    resumes from the captured CID instead of re-uploading.
    """

    model_config = ConfigDict(frozen=True)

    artifact_name: str
    upload: UploadResult | None = None
    pin: PinRecord | None = None
    anchor_receipt: AnchorReceipt | None = None

    @property
    def cid(self) -> str | None:
        return self.upload.cid if self.upload else None


class ManifestEntry(BaseModel):
    """Summary line for one publication in the manifest file."""

    model_config = ConfigDict(frozen=True)

    name: str
    cid: str
    content_uri: str
    gateway_urls: list[str]
    document_id: int
    transaction_ref: str
    verified: bool


class Publication(BaseModel):
    """The joined result of all five pipeline stages for one artifact.

    Only produced when no fatal stage failed. ``pinned`` is false whenever
    the pin stage degraded, and ``verified`` is false while the ledger has
    not yet reflected the anchor.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    upload: UploadResult
    pin: PinRecord | None = None
    anchor: AnchorRecord
    content_uri: str
    gateway_urls: list[str]
    pinned: bool
    verified: bool
    issues: list[PublicationIssue] = []
    published_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def cid(self) -> str:
        return self.upload.cid

    def to_manifest_entry(self) -> ManifestEntry:
        return ManifestEntry(
            name=self.name,
            cid=self.cid,
            content_uri=self.content_uri,
            gateway_urls=list(self.gateway_urls),
            document_id=self.anchor.document_id,
            transaction_ref=self.anchor.transaction_ref,
            verified=self.verified,
        )


class ArtifactError(BaseModel):
    """Batch outcome for an artifact whose pipeline failed fatally."""

    model_config = ConfigDict(frozen=True)

    name: str
    stage: PipelineStage
    error_type: str
    message: str
    checkpoint: PipelineCheckpoint
    failed: bool = True


class ManifestDocument(BaseModel):
    """The manifest file written once at the end of a publishing session."""

    model_config = ConfigDict(frozen=True)

    framework: str
    version: str
    published_at: datetime
    total_artifacts: int
    artifacts: list[ManifestEntry]
