"""Event dispatch — fans pipeline events out to every registered observer.

The publisher and verifier never print or log progress inline. They emit
``PipelineEvent``s here; logging, terminal progress and audit trails are
observers. A failing observer is logged and skipped; it never affects the
pipeline or the remaining observers.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from anchorpress.models.events import EventKind, PipelineEvent

logger = logging.getLogger(__name__)


@runtime_checkable
class PipelineObserver(Protocol):
    """Anything with a ``notify(event)`` method can observe the pipeline."""

    def notify(self, event: PipelineEvent) -> None:
        ...


class EventDispatcher:
    """Routes events to ALL registered observers, in registration order.

    Usage
    -----
    >>> dispatcher = EventDispatcher()
    >>> dispatcher.subscribe(LoggingObserver())
    >>> dispatcher.emit(event)
    """

    def __init__(self, observers: list[PipelineObserver] | None = None) -> None:
        self._observers: list[PipelineObserver] = []
        for observer in observers or []:
            self.subscribe(observer)

    def subscribe(self, observer: PipelineObserver) -> None:
        """Register *observer*. Duplicate registration is ignored."""
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: PipelineObserver) -> None:
        try:
            self._observers.remove(observer)
        except ValueError:
            pass

    @property
    def observers(self) -> list[PipelineObserver]:
        """Return a copy of the registered observer list."""
        return list(self._observers)

    def emit(self, event: PipelineEvent) -> int:
        """Deliver *event* to every observer.

        Returns the number of observers that accepted it.
        """
        delivered = 0
        for observer in self._observers:
            try:
                observer.notify(event)
                delivered += 1
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "Observer %s failed for event %s (%s): %s",
                    type(observer).__name__,
                    event.event_id,
                    event.kind.value,
                    exc,
                )
        return delivered


class LoggingObserver:
    """Turns pipeline events into log records.

    Failures log at ERROR, degradations and failed checks at WARNING,
    everything else at INFO.
    """

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logging.getLogger("anchorpress.pipeline")

    def notify(self, event: PipelineEvent) -> None:
        level = logging.INFO
        if event.kind == EventKind.STAGE_FAILED:
            level = logging.ERROR
        elif event.kind == EventKind.STAGE_DEGRADED:
            level = logging.WARNING
        elif event.kind == EventKind.CHECK_COMPLETED and event.details.get("status") not in (
            "PASS",
            None,
        ):
            level = logging.WARNING

        stage = event.stage.value if event.stage else "-"
        self._log.log(
            level,
            "%s [%s] %s cid=%s %s",
            event.artifact_name or "-",
            stage,
            event.kind.value,
            event.cid or "-",
            event.message,
        )


class EventRecorder:
    """Keeps every event in memory, in delivery order."""

    def __init__(self) -> None:
        self.events: list[PipelineEvent] = []

    def notify(self, event: PipelineEvent) -> None:
        self.events.append(event)

    def kinds(self) -> list[EventKind]:
        return [e.kind for e in self.events]

    def clear(self) -> None:
        self.events.clear()
