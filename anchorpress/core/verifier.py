"""Verifier — independent re-verification of a published CID.

Trust is re-derived from three unrelated sources, none assumed honest or
available:

* Content Availability — can the store still serve the bytes?
* Pin Durability       — does the pinning service list the CID as pinned?
* Ledger Anchoring     — does the ledger hold an anchor for the CID?

Each check is attempted and recorded regardless of the others. A source
that answers "not here" is a FAIL; a source that cannot be asked is an
ERROR. Only FAIL downgrades the overall status, because unavailability is
transient while an affirmative absence is not. An unpinned CID is a
WARNING: a missing pin does not prove the content is unreachable.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from anchorpress.config import PublishSettings
from anchorpress.core.capabilities import ContentStore, Ledger, PinningService
from anchorpress.core.errors import ContentNotFound
from anchorpress.core.events import EventDispatcher, LoggingObserver
from anchorpress.core.hasher import compute_cid, is_supported_cid
from anchorpress.core.manifest import write_json_atomic
from anchorpress.models.artifacts import PinStatus
from anchorpress.models.events import EventKind, PipelineEvent
from anchorpress.models.reports import (
    CheckStatus,
    VerificationCheck,
    VerificationReport,
)

logger = logging.getLogger(__name__)

AVAILABILITY_CHECK = "Content Availability"
DURABILITY_CHECK = "Pin Durability"
ANCHORING_CHECK = "Ledger Anchoring"


class Verifier:
    """Produces a ``VerificationReport`` for a CID.

    Parameters
    ----------
    store, pins, ledger:
        The three trust sources.
    settings:
        ``verify_concurrently`` selects thread-pool execution of the checks.
    dispatcher:
        Receives one ``check_completed`` event per check and a final
        ``verification_completed`` event.
    """

    def __init__(
        self,
        store: ContentStore,
        pins: PinningService,
        ledger: Ledger,
        settings: PublishSettings | None = None,
        *,
        dispatcher: EventDispatcher | None = None,
    ) -> None:
        self._store = store
        self._pins = pins
        self._ledger = ledger
        self.settings = settings or PublishSettings()
        self.dispatcher = dispatcher or EventDispatcher([LoggingObserver()])

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def verify(self, cid: str) -> VerificationReport:
        """Run all three checks for *cid* and return the merged report.

        Safe to call repeatedly: the report depends only on backend state.
        """
        checks: list[Callable[[str], VerificationCheck]] = [
            self.check_availability,
            self.check_durability,
            self.check_anchoring,
        ]

        if self.settings.verify_concurrently:
            with ThreadPoolExecutor(max_workers=len(checks)) as pool:
                futures = [pool.submit(check, cid) for check in checks]
                results = [future.result() for future in futures]
        else:
            results = [check(cid) for check in checks]

        # Built only once every check has finished.
        report = VerificationReport.from_checks(cid, results)

        for result in results:
            self._emit(EventKind.CHECK_COMPLETED, cid, result.message, {
                "check": result.name,
                "status": result.status.value,
            })
        self._emit(
            EventKind.VERIFICATION_COMPLETED,
            cid,
            report.overall_status.value,
            report.summary.model_dump(mode="json"),
        )
        return report

    def verify_many(self, cids: Iterable[str]) -> list[VerificationReport]:
        """Verify each CID in order."""
        return [self.verify(cid) for cid in cids]

    # ------------------------------------------------------------------
    # Checks: each returns a result and never raises
    # ------------------------------------------------------------------

    def check_availability(self, cid: str) -> VerificationCheck:
        try:
            content = self._store.get(cid)
        except ContentNotFound as exc:
            return VerificationCheck(
                name=AVAILABILITY_CHECK,
                status=CheckStatus.FAIL,
                message=f"Content not available: {exc}",
            )
        except Exception as exc:  # noqa: BLE001
            return _error(AVAILABILITY_CHECK, exc)

        if is_supported_cid(cid) and compute_cid(content) != cid:
            return VerificationCheck(
                name=AVAILABILITY_CHECK,
                status=CheckStatus.FAIL,
                message="Content served for this CID does not hash to it",
                details={"size": len(content), "served_cid": compute_cid(content)},
            )
        return VerificationCheck(
            name=AVAILABILITY_CHECK,
            status=CheckStatus.PASS,
            message=f"Content available ({len(content)} bytes)",
            details={"size": len(content)},
        )

    def check_durability(self, cid: str) -> VerificationCheck:
        try:
            record = self._pins.status(cid)
        except Exception as exc:  # noqa: BLE001
            return _error(DURABILITY_CHECK, exc)

        if record is None:
            return VerificationCheck(
                name=DURABILITY_CHECK,
                status=CheckStatus.WARNING,
                message="Not pinned",
            )
        if record.status != PinStatus.PINNED:
            return VerificationCheck(
                name=DURABILITY_CHECK,
                status=CheckStatus.WARNING,
                message=f"Pin status is {record.status.value}",
                details={"status": record.status.value},
            )
        return VerificationCheck(
            name=DURABILITY_CHECK,
            status=CheckStatus.PASS,
            message=f"Pinned since {record.pinned_at.isoformat()}",
            details={
                "status": record.status.value,
                "pinned_at": record.pinned_at.isoformat(),
                "metadata": dict(record.metadata),
            },
        )

    def check_anchoring(self, cid: str) -> VerificationCheck:
        try:
            record = self._ledger.lookup_by_cid(cid)
        except Exception as exc:  # noqa: BLE001
            return _error(ANCHORING_CHECK, exc)

        if record is None:
            return VerificationCheck(
                name=ANCHORING_CHECK,
                status=CheckStatus.FAIL,
                message="Not found on ledger",
            )
        return VerificationCheck(
            name=ANCHORING_CHECK,
            status=CheckStatus.PASS,
            message=f"Anchored as document ID {record.document_id}",
            details=record.model_dump(mode="json"),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _emit(self, kind: EventKind, cid: str, message: str, details: dict) -> None:
        self.dispatcher.emit(
            PipelineEvent(kind=kind, cid=cid, message=message, details=details)
        )


def _error(name: str, exc: Exception) -> VerificationCheck:
    logger.debug("%s could not be checked: %r", name, exc)
    return VerificationCheck(
        name=name,
        status=CheckStatus.ERROR,
        message=str(exc) or type(exc).__name__,
        details={"error_type": type(exc).__name__},
    )


def save_report(report: VerificationReport, path: Path | str) -> Path:
    """Persist *report* as a single JSON document (atomic replace)."""
    path = Path(path)
    write_json_atomic(path, report.model_dump(mode="json"))
    return path


def load_report(path: Path | str) -> VerificationReport:
    return VerificationReport.model_validate(json.loads(Path(path).read_text(encoding="utf-8")))
