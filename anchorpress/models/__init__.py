"""anchorpress data models — all Pydantic v2, all frozen (immutable)."""

from anchorpress.models.anchors import AnchorReceipt, AnchorRecord
from anchorpress.models.artifacts import Artifact, PinRecord, PinStatus, UploadResult
from anchorpress.models.events import EventKind, PipelineEvent
from anchorpress.models.publication import (
    ArtifactError,
    ManifestDocument,
    ManifestEntry,
    PipelineCheckpoint,
    Publication,
    PublicationIssue,
)
from anchorpress.models.reports import (
    CheckStatus,
    OverallStatus,
    VerificationCheck,
    VerificationReport,
    VerificationSummary,
)
from anchorpress.models.stages import (
    VALID_TRANSITIONS,
    PipelineStage,
    PipelineState,
    StageTransition,
)

__all__ = [
    # artifacts
    "Artifact",
    "UploadResult",
    "PinStatus",
    "PinRecord",
    # anchors
    "AnchorReceipt",
    "AnchorRecord",
    # stages
    "PipelineStage",
    "PipelineState",
    "StageTransition",
    "VALID_TRANSITIONS",
    # publication
    "Publication",
    "PublicationIssue",
    "PipelineCheckpoint",
    "ArtifactError",
    "ManifestEntry",
    "ManifestDocument",
    # reports
    "CheckStatus",
    "OverallStatus",
    "VerificationCheck",
    "VerificationSummary",
    "VerificationReport",
    # events
    "EventKind",
    "PipelineEvent",
]
