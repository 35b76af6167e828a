"""Tests for the event dispatcher and its standard observers."""

from __future__ import annotations

import logging

import pytest

from anchorpress.core.events import (
    EventDispatcher,
    EventRecorder,
    LoggingObserver,
    PipelineObserver,
)
from anchorpress.models.events import EventKind, PipelineEvent
from anchorpress.models.stages import PipelineStage


def _event(kind: EventKind = EventKind.STAGE_STARTED, **kwargs) -> PipelineEvent:
    return PipelineEvent(kind=kind, artifact_name="doc.md", **kwargs)


class _Exploding:
    def notify(self, event: PipelineEvent) -> None:
        raise RuntimeError("observer bug")


class TestEventDispatcher:
    def test_delivers_to_all_in_order(self):
        seen: list[str] = []

        class Tagged:
            def __init__(self, tag: str) -> None:
                self.tag = tag

            def notify(self, event: PipelineEvent) -> None:
                seen.append(self.tag)

        dispatcher = EventDispatcher([Tagged("a"), Tagged("b")])
        assert dispatcher.emit(_event()) == 2
        assert seen == ["a", "b"]

    def test_duplicate_subscribe_ignored(self, recorder: EventRecorder):
        dispatcher = EventDispatcher()
        dispatcher.subscribe(recorder)
        dispatcher.subscribe(recorder)
        dispatcher.emit(_event())
        assert len(recorder.events) == 1

    def test_unsubscribe(self, recorder: EventRecorder):
        dispatcher = EventDispatcher([recorder])
        dispatcher.unsubscribe(recorder)
        dispatcher.unsubscribe(recorder)
        assert dispatcher.emit(_event()) == 0
        assert dispatcher.observers == []

    def test_failing_observer_does_not_block_others(
        self, recorder: EventRecorder, caplog: pytest.LogCaptureFixture
    ):
        dispatcher = EventDispatcher([_Exploding(), recorder])
        with caplog.at_level(logging.ERROR, logger="anchorpress.core.events"):
            delivered = dispatcher.emit(_event())
        assert delivered == 1
        assert len(recorder.events) == 1
        assert "observer bug" in caplog.text

    def test_observers_satisfy_protocol(self, recorder: EventRecorder):
        assert isinstance(recorder, PipelineObserver)
        assert isinstance(LoggingObserver(), PipelineObserver)


class TestLoggingObserver:
    @pytest.mark.parametrize(
        ("event", "level"),
        [
            (_event(EventKind.STAGE_STARTED, stage=PipelineStage.UPLOAD), logging.INFO),
            (_event(EventKind.STAGE_FAILED, stage=PipelineStage.ANCHOR), logging.ERROR),
            (_event(EventKind.STAGE_DEGRADED, stage=PipelineStage.PIN), logging.WARNING),
            (_event(EventKind.CHECK_COMPLETED, details={"status": "PASS"}), logging.INFO),
            (_event(EventKind.CHECK_COMPLETED, details={"status": "FAIL"}), logging.WARNING),
        ],
    )
    def test_levels(self, event: PipelineEvent, level: int, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.DEBUG, logger="anchorpress.pipeline"):
            LoggingObserver().notify(event)
        assert caplog.records[-1].levelno == level
        assert "doc.md" in caplog.records[-1].getMessage()

    def test_custom_logger(self, caplog: pytest.LogCaptureFixture):
        log = logging.getLogger("tests.audit")
        with caplog.at_level(logging.INFO, logger="tests.audit"):
            LoggingObserver(log).notify(_event(message="hello"))
        assert caplog.records[-1].name == "tests.audit"


class TestEventRecorder:
    def test_kinds_and_clear(self, recorder: EventRecorder):
        recorder.notify(_event(EventKind.STAGE_STARTED))
        recorder.notify(_event(EventKind.STAGE_SUCCEEDED))
        assert recorder.kinds() == [EventKind.STAGE_STARTED, EventKind.STAGE_SUCCEEDED]
        recorder.clear()
        assert recorder.events == []

    def test_failure_flag(self):
        assert _event(EventKind.STAGE_FAILED).is_failure
        assert not _event(EventKind.STAGE_DEGRADED).is_failure
