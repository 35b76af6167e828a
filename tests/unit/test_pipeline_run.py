"""Tests for PipelineRun — the single-artifact publication state machine."""

from __future__ import annotations

import pytest

from anchorpress.core.errors import InvalidTransitionError
from anchorpress.core.events import EventDispatcher, EventRecorder
from anchorpress.core.hasher import compute_cid
from anchorpress.core.pipeline import PipelineRun
from anchorpress.models.artifacts import UploadResult
from anchorpress.models.events import EventKind
from anchorpress.models.publication import PipelineCheckpoint
from anchorpress.models.stages import PipelineStage, PipelineState


@pytest.fixture
def run(dispatcher: EventDispatcher) -> PipelineRun:
    return PipelineRun("charter.md", dispatcher)


def _upload() -> UploadResult:
    return UploadResult(cid=compute_cid(b"x"), size=1, local_digest="00" * 32)


class TestPipelineRun:
    def test_starts_pending(self, run: PipelineRun):
        assert run.state == PipelineState.PENDING
        assert run.current_stage is None
        assert not run.is_terminal
        assert run.run_id.startswith("pub-")

    def test_happy_path(self, run: PipelineRun, recorder: EventRecorder):
        for state in (
            PipelineState.UPLOADING,
            PipelineState.PINNING,
            PipelineState.VERIFYING,
            PipelineState.ANCHORING,
            PipelineState.CONFIRMING,
        ):
            run.begin(state)
            run.succeed()
        run.complete("done")

        assert run.state == PipelineState.DONE
        assert run.is_terminal
        assert len(run.history) == 6
        assert recorder.kinds()[-1] == EventKind.PUBLICATION_COMPLETED
        assert recorder.kinds().count(EventKind.STAGE_STARTED) == 5

    def test_begin_returns_stage(self, run: PipelineRun):
        assert run.begin(PipelineState.UPLOADING) == PipelineStage.UPLOAD
        assert run.current_stage == PipelineStage.UPLOAD

    def test_cannot_skip_upload_after_starting(self, run: PipelineRun):
        run.begin(PipelineState.UPLOADING)
        with pytest.raises(InvalidTransitionError):
            run.begin(PipelineState.ANCHORING)

    def test_cannot_anchor_from_pending(self, run: PipelineRun):
        with pytest.raises(InvalidTransitionError):
            run.begin(PipelineState.ANCHORING)

    def test_begin_rejects_non_working_state(self, run: PipelineRun):
        with pytest.raises(InvalidTransitionError):
            run.begin(PipelineState.DONE)

    @pytest.mark.parametrize(
        ("path", "failed"),
        [
            ([PipelineState.UPLOADING], PipelineState.UPLOAD_FAILED),
            (
                [PipelineState.UPLOADING, PipelineState.PINNING, PipelineState.VERIFYING],
                PipelineState.INTEGRITY_FAILED,
            ),
            (
                [
                    PipelineState.UPLOADING,
                    PipelineState.PINNING,
                    PipelineState.VERIFYING,
                    PipelineState.ANCHORING,
                ],
                PipelineState.ANCHOR_FAILED,
            ),
        ],
    )
    def test_fail_reaches_named_terminal_state(
        self, run: PipelineRun, path: list[PipelineState], failed: PipelineState
    ):
        for state in path:
            run.begin(state)
        run.fail("boom")
        assert run.state == failed
        assert run.is_terminal
        assert run.history[-1].reason == "boom"

    def test_pin_stage_cannot_fail_terminally(self, run: PipelineRun):
        run.begin(PipelineState.UPLOADING)
        run.begin(PipelineState.PINNING)
        with pytest.raises(InvalidTransitionError):
            run.fail("pin down")
        assert run.state == PipelineState.PINNING

    def test_terminal_state_is_final(self, run: PipelineRun):
        run.begin(PipelineState.UPLOADING)
        run.fail("boom")
        with pytest.raises(InvalidTransitionError):
            run.begin(PipelineState.PINNING)

    def test_degrade_does_not_change_state(self, run: PipelineRun, recorder: EventRecorder):
        run.begin(PipelineState.UPLOADING)
        run.begin(PipelineState.PINNING)
        run.degrade("pin pending")
        assert run.state == PipelineState.PINNING
        assert recorder.events[-1].kind == EventKind.STAGE_DEGRADED
        assert recorder.events[-1].stage == PipelineStage.PIN

    def test_resume_may_enter_at_pinning(self):
        run = PipelineRun(
            "charter.md",
            checkpoint=PipelineCheckpoint(artifact_name="charter.md", upload=_upload()),
        )
        run.begin(PipelineState.PINNING)
        assert run.state == PipelineState.PINNING

    def test_events_carry_run_id_and_cid(self, run: PipelineRun, recorder: EventRecorder):
        run.begin(PipelineState.UPLOADING)
        upload = _upload()
        run.record_upload(upload)
        run.succeed("uploaded", size=1)
        event = recorder.events[-1]
        assert event.details["run_id"] == run.run_id
        assert event.details["size"] == 1
        assert event.cid == upload.cid
        assert event.artifact_name == "charter.md"

    def test_checkpoint_capture(self, run: PipelineRun):
        upload = _upload()
        run.record_upload(upload)
        assert run.checkpoint.upload == upload
        assert run.checkpoint.cid == upload.cid
        assert run.checkpoint.pin is None
