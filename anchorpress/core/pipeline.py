"""Finite-state publication run for a single artifact.

Enforces:
- Valid state transitions only (VALID_TRANSITIONS table)
- One terminal success (DONE) and one named terminal failure per fatal stage
- Every transition recorded in the run history and emitted as an event
- A checkpoint of every intermediate result, for resumption
"""

from __future__ import annotations

import uuid
from typing import Any

from anchorpress.core.errors import InvalidTransitionError
from anchorpress.core.events import EventDispatcher
from anchorpress.models.anchors import AnchorReceipt
from anchorpress.models.artifacts import PinRecord, UploadResult
from anchorpress.models.events import EventKind, PipelineEvent
from anchorpress.models.publication import PipelineCheckpoint
from anchorpress.models.stages import (
    FAILURE_STATE,
    STATE_STAGE,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    PipelineStage,
    PipelineState,
    StageTransition,
)


class PipelineRun:
    """State and captured results of one artifact's publication.

    Parameters
    ----------
    artifact_name:
        Name of the artifact being published.
    dispatcher:
        Receives a ``PipelineEvent`` for every stage start, success,
        degradation and failure.
    checkpoint:
        Results captured by an earlier run, when resuming.
    """

    def __init__(
        self,
        artifact_name: str,
        dispatcher: EventDispatcher | None = None,
        *,
        checkpoint: PipelineCheckpoint | None = None,
    ) -> None:
        self.run_id = f"pub-{uuid.uuid4().hex[:12]}"
        self.artifact_name = artifact_name
        self._dispatcher = dispatcher or EventDispatcher()
        self._state = PipelineState.PENDING
        self._history: list[StageTransition] = []
        self._checkpoint = checkpoint or PipelineCheckpoint(artifact_name=artifact_name)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def history(self) -> list[StageTransition]:
        return list(self._history)

    @property
    def checkpoint(self) -> PipelineCheckpoint:
        return self._checkpoint

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    @property
    def current_stage(self) -> PipelineStage | None:
        return STATE_STAGE.get(self._state)

    def _transition(self, target: PipelineState, reason: str | None = None) -> None:
        allowed = VALID_TRANSITIONS.get(self._state, set())
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition {self.artifact_name!r} from {self._state.value} "
                f"to {target.value}. Allowed: {sorted(s.value for s in allowed)}"
            )
        self._history.append(
            StageTransition(from_state=self._state, to_state=target, reason=reason)
        )
        self._state = target

    def _emit(
        self,
        kind: EventKind,
        stage: PipelineStage | None,
        message: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        self._dispatcher.emit(
            PipelineEvent(
                kind=kind,
                artifact_name=self.artifact_name,
                stage=stage,
                cid=self._checkpoint.cid,
                message=message,
                details={"run_id": self.run_id, **(details or {})},
            )
        )

    # ------------------------------------------------------------------
    # Stage lifecycle
    # ------------------------------------------------------------------

    def begin(self, state: PipelineState) -> PipelineStage:
        """Enter working *state* and announce its stage."""
        stage = STATE_STAGE.get(state)
        if stage is None:
            raise InvalidTransitionError(f"{state.value} is not a working state")
        self._transition(state)
        self._emit(EventKind.STAGE_STARTED, stage)
        return stage

    def succeed(self, message: str = "", **details: Any) -> None:
        """Announce that the current stage succeeded."""
        self._emit(EventKind.STAGE_SUCCEEDED, self.current_stage, message, details)

    def degrade(self, message: str, **details: Any) -> None:
        """Announce a non-fatal failure of the current stage."""
        self._emit(EventKind.STAGE_DEGRADED, self.current_stage, message, details)

    def fail(self, message: str, **details: Any) -> None:
        """Move to the terminal failure state of the current stage."""
        stage = self.current_stage
        target = FAILURE_STATE.get(stage) if stage else None
        if target is None:
            raise InvalidTransitionError(
                f"Stage {stage.value if stage else None} cannot fail terminally"
            )
        self._transition(target, reason=message)
        self._emit(EventKind.STAGE_FAILED, stage, message, details)

    def complete(self, message: str = "", **details: Any) -> None:
        """Move to DONE."""
        self._transition(PipelineState.DONE)
        self._emit(EventKind.PUBLICATION_COMPLETED, None, message, details)

    # ------------------------------------------------------------------
    # Checkpoint capture
    # ------------------------------------------------------------------

    def record_upload(self, upload: UploadResult) -> None:
        self._checkpoint = self._checkpoint.model_copy(update={"upload": upload})

    def record_pin(self, pin: PinRecord | None) -> None:
        self._checkpoint = self._checkpoint.model_copy(update={"pin": pin})

    def record_anchor(self, receipt: AnchorReceipt) -> None:
        self._checkpoint = self._checkpoint.model_copy(update={"anchor_receipt": receipt})

    def __repr__(self) -> str:
        return f"<PipelineRun {self.run_id} {self.artifact_name!r} state={self._state.value}>"
