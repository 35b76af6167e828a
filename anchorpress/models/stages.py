"""Publication pipeline state machine models — stages, states, transitions."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PipelineStage(str, Enum):
    """The five ordered stages of a single-artifact publication."""

    UPLOAD = "Upload"
    PIN = "Pin"
    INTEGRITY_CHECK = "IntegrityCheck"
    ANCHOR = "Anchor"
    CONFIRM = "Confirm"


class PipelineState(str, Enum):
    """Strict state model for one publication run."""

    PENDING = "pending"
    UPLOADING = "uploading"
    PINNING = "pinning"
    VERIFYING = "verifying"
    ANCHORING = "anchoring"
    CONFIRMING = "confirming"
    DONE = "done"
    # Named terminal failure states, one per fatal stage.
    UPLOAD_FAILED = "upload_failed"
    INTEGRITY_FAILED = "integrity_failed"
    ANCHOR_FAILED = "anchor_failed"


# Valid state transitions, enforced by PipelineRun.
# Pinning never fails terminally and confirming always reaches DONE.
# A resumed run may enter at PINNING or VERIFYING.
VALID_TRANSITIONS: dict[PipelineState, set[PipelineState]] = {
    PipelineState.PENDING: {
        PipelineState.UPLOADING,
        PipelineState.PINNING,
        PipelineState.VERIFYING,
    },
    PipelineState.UPLOADING: {PipelineState.PINNING, PipelineState.UPLOAD_FAILED},
    PipelineState.PINNING: {PipelineState.VERIFYING},
    PipelineState.VERIFYING: {PipelineState.ANCHORING, PipelineState.INTEGRITY_FAILED},
    PipelineState.ANCHORING: {PipelineState.CONFIRMING, PipelineState.ANCHOR_FAILED},
    PipelineState.CONFIRMING: {PipelineState.DONE},
    PipelineState.DONE: set(),  # terminal
    PipelineState.UPLOAD_FAILED: set(),  # terminal
    PipelineState.INTEGRITY_FAILED: set(),  # terminal
    PipelineState.ANCHOR_FAILED: set(),  # terminal
}

TERMINAL_STATES: frozenset[PipelineState] = frozenset(
    state for state, targets in VALID_TRANSITIONS.items() if not targets
)

# Which stage is executing while the run sits in a working state.
STATE_STAGE: dict[PipelineState, PipelineStage] = {
    PipelineState.UPLOADING: PipelineStage.UPLOAD,
    PipelineState.PINNING: PipelineStage.PIN,
    PipelineState.VERIFYING: PipelineStage.INTEGRITY_CHECK,
    PipelineState.ANCHORING: PipelineStage.ANCHOR,
    PipelineState.CONFIRMING: PipelineStage.CONFIRM,
}

# Terminal failure state reached when a fatal stage fails.
FAILURE_STATE: dict[PipelineStage, PipelineState] = {
    PipelineStage.UPLOAD: PipelineState.UPLOAD_FAILED,
    PipelineStage.INTEGRITY_CHECK: PipelineState.INTEGRITY_FAILED,
    PipelineStage.ANCHOR: PipelineState.ANCHOR_FAILED,
}


class StageTransition(BaseModel):
    """Records a single state transition for the run's audit trail."""

    model_config = ConfigDict(frozen=True)

    from_state: PipelineState
    to_state: PipelineState
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    reason: str | None = None  # populated when entering a failure state
