"""Publisher — upload, pin, integrity-check, anchor and confirm artifacts.

The Publisher wires a ContentStore, a PinningService and a Ledger into the
five-stage publication pipeline and owns the session manifest.

Stage policy
------------
1. Upload           fatal on failure
2. Pin              non-fatal; recorded as ``PinningDegraded``
3. Integrity check  fatal; nothing is anchored for content that does not
                    round-trip to the digest taken before upload
4. Anchor           fatal, never retried automatically
5. Confirm          non-fatal; recorded as ``NotYetConfirmed``

Pinning runs before the integrity check and tolerates failure, while the
integrity check is fatal. Changing that order changes the
durability-versus-correctness trade-off and must be revisited explicitly.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from pathlib import Path

from anchorpress.config import PublishSettings
from anchorpress.core.capabilities import ContentStore, Ledger, PinningService
from anchorpress.core.errors import (
    IntegrityMismatch,
    LedgerRejection,
    ManifestError,
    NotYetConfirmed,
    PinningDegraded,
    PipelineError,
)
from anchorpress.core.events import EventDispatcher, LoggingObserver
from anchorpress.core.gateways import content_uri, gateway_urls
from anchorpress.core.hasher import digests_match, sha256_hex
from anchorpress.core.manifest import SessionManifest
from anchorpress.core.pipeline import PipelineRun
from anchorpress.models.anchors import AnchorReceipt, AnchorRecord
from anchorpress.models.artifacts import Artifact, PinRecord, UploadResult
from anchorpress.models.publication import (
    ArtifactError,
    ManifestDocument,
    PipelineCheckpoint,
    Publication,
    PublicationIssue,
)
from anchorpress.models.stages import PipelineStage, PipelineState

logger = logging.getLogger(__name__)


class Publisher:
    """Publishes artifacts and records them in a session manifest.

    Parameters
    ----------
    store, pins, ledger:
        The three external capabilities.
    settings:
        Publishing configuration. Defaults are used if not provided.
    dispatcher:
        Event dispatcher for stage events. Defaults to one with a
        ``LoggingObserver`` subscribed.
    clock:
        Returns seconds since the epoch; used for anchor timestamps.
    sleep:
        Called with the batch spacing delay between artifacts.
    """

    def __init__(
        self,
        store: ContentStore,
        pins: PinningService,
        ledger: Ledger,
        settings: PublishSettings | None = None,
        *,
        dispatcher: EventDispatcher | None = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._store = store
        self._pins = pins
        self._ledger = ledger
        self.settings = settings or PublishSettings()
        self.dispatcher = dispatcher or EventDispatcher([LoggingObserver()])
        self._clock = clock
        self._sleep = sleep
        self.manifest = SessionManifest(
            framework=self.settings.framework_name,
            version=self.settings.framework_version,
        )

    # ------------------------------------------------------------------
    # Single artifact
    # ------------------------------------------------------------------

    def publish(
        self,
        artifact: Artifact,
        *,
        resume_from: PipelineCheckpoint | None = None,
    ) -> Publication:
        """Run the five-stage pipeline for *artifact*.

        Parameters
        ----------
        artifact:
            The artifact to publish.
        resume_from:
            Checkpoint from an earlier failed attempt. Its upload is reused
            when the digest matches this artifact's content, and its pin is
            reused when it is already ``pinned``.

        Raises
        ------
        PipelineError
            On a fatal stage failure (``IntegrityMismatch`` and
            ``LedgerRejection`` are subclasses). The error carries the
            failing stage and a checkpoint of everything obtained so far.
        ManifestError
            If the session manifest was already saved. Raised before any
            capability is called.
        """
        self._ensure_manifest_open()

        # Digest is taken before the bytes leave the process.
        local_digest = sha256_hex(artifact.content)
        resumed_upload = self._resumable_upload(resume_from, local_digest)

        run = PipelineRun(
            artifact.name,
            self.dispatcher,
            checkpoint=PipelineCheckpoint(
                artifact_name=artifact.name,
                upload=resumed_upload,
                pin=resume_from.pin if resumed_upload and resume_from else None,
            ),
        )
        issues: list[PublicationIssue] = []

        upload = resumed_upload or self._upload(run, artifact, local_digest)

        pin = run.checkpoint.pin
        if pin is not None and pin.is_pinned and pin.cid == upload.cid:
            logger.debug("Reusing pin for %s from checkpoint", upload.cid)
        else:
            pin = self._pin(run, artifact, upload.cid, issues)

        self._check_integrity(run, upload)
        receipt, timestamp = self._anchor(run, artifact, upload.cid)
        anchor, verified = self._confirm(run, artifact, receipt, timestamp, issues)

        publication = Publication(
            name=artifact.name,
            upload=upload,
            pin=pin,
            anchor=anchor,
            content_uri=content_uri(upload.cid),
            gateway_urls=gateway_urls(upload.cid, self.settings.gateway_templates),
            pinned=pin is not None and pin.is_pinned,
            verified=verified,
            issues=issues,
        )
        position = self.manifest.append(publication)
        run.complete(
            f"published as document {anchor.document_id}",
            document_id=anchor.document_id,
            manifest_position=position,
            verified=verified,
        )
        return publication

    @staticmethod
    def _resumable_upload(
        checkpoint: PipelineCheckpoint | None, local_digest: str
    ) -> UploadResult | None:
        if checkpoint is None or checkpoint.upload is None:
            return None
        if not digests_match(checkpoint.upload.local_digest, local_digest):
            raise ValueError(
                f"Checkpoint for {checkpoint.artifact_name!r} does not match the "
                "artifact content; refusing to resume"
            )
        return checkpoint.upload

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _upload(self, run: PipelineRun, artifact: Artifact, local_digest: str) -> UploadResult:
        run.begin(PipelineState.UPLOADING)
        try:
            cid, size = self._store.put(artifact.content)
        except Exception as exc:
            run.fail(f"upload failed: {exc}", error_type=type(exc).__name__)
            raise PipelineError(
                f"Upload of {artifact.name!r} failed",
                stage=PipelineStage.UPLOAD,
                checkpoint=run.checkpoint,
                cause=exc,
            ) from exc

        upload = UploadResult(cid=cid, size=size, local_digest=local_digest)
        run.record_upload(upload)
        run.succeed(f"uploaded {size} bytes", size=size, local_digest=local_digest)
        return upload

    def _pin(
        self,
        run: PipelineRun,
        artifact: Artifact,
        cid: str,
        issues: list[PublicationIssue],
    ) -> PinRecord | None:
        run.begin(PipelineState.PINNING)
        pin: PinRecord | None
        try:
            pin = self._pins.pin(cid, self.pin_metadata(artifact))
        except Exception as exc:  # noqa: BLE001 - pin failure degrades, never aborts
            pin = None
            degraded = PinningDegraded(f"Pinning failed: {exc}")
        else:
            degraded = (
                None
                if pin.is_pinned
                else PinningDegraded(f"Pin status is {pin.status.value}, not pinned")
            )

        run.record_pin(pin)
        if degraded is None:
            run.succeed("pinned", status=pin.status.value if pin else None)
        else:
            issues.append(
                PublicationIssue(
                    kind=type(degraded).__name__,
                    stage=PipelineStage.PIN,
                    message=str(degraded),
                )
            )
            run.degrade(str(degraded))
        return pin

    def _check_integrity(self, run: PipelineRun, upload: UploadResult) -> None:
        run.begin(PipelineState.VERIFYING)
        try:
            retrieved = self._store.get(upload.cid)
        except Exception as exc:
            run.fail(f"retrieval failed: {exc}", error_type=type(exc).__name__)
            raise IntegrityMismatch(
                f"Content {upload.cid} could not be retrieved for verification",
                checkpoint=run.checkpoint,
                cause=exc,
                expected_digest=upload.local_digest,
            ) from exc

        actual_digest = sha256_hex(retrieved)
        if not digests_match(upload.local_digest, actual_digest):
            run.fail(
                "digest mismatch",
                expected=upload.local_digest,
                actual=actual_digest,
            )
            raise IntegrityMismatch(
                f"Digest mismatch for {upload.cid}: expected {upload.local_digest}, "
                f"got {actual_digest}",
                checkpoint=run.checkpoint,
                expected_digest=upload.local_digest,
                actual_digest=actual_digest,
            )
        run.succeed("digest match", digest=actual_digest)

    def _anchor(
        self, run: PipelineRun, artifact: Artifact, cid: str
    ) -> tuple[AnchorReceipt, int]:
        run.begin(PipelineState.ANCHORING)
        timestamp = int(self._clock())
        try:
            receipt = self._ledger.anchor(artifact.name, cid, timestamp)
        except Exception as exc:
            run.fail(f"anchor failed: {exc}", error_type=type(exc).__name__)
            raise LedgerRejection(
                f"Anchor submission for {cid} failed",
                checkpoint=run.checkpoint,
                cause=exc,
            ) from exc

        run.record_anchor(receipt)
        run.succeed(
            f"anchored as document {receipt.document_id}",
            document_id=receipt.document_id,
            transaction_ref=receipt.transaction_ref,
            block=receipt.confirmed_at_block,
        )
        return receipt, timestamp

    def _confirm(
        self,
        run: PipelineRun,
        artifact: Artifact,
        receipt: AnchorReceipt,
        timestamp: int,
        issues: list[PublicationIssue],
    ) -> tuple[AnchorRecord, bool]:
        run.begin(PipelineState.CONFIRMING)
        cid = run.checkpoint.cid or ""

        reason = "ledger does not reflect the anchor yet"
        try:
            record = self._ledger.lookup_by_cid(cid)
        except Exception as exc:  # noqa: BLE001 - confirmation is advisory
            record = None
            reason = f"ledger lookup failed: {exc}"

        if record is not None and not _same_anchor(record, receipt):
            reason = (
                f"ledger shows document {record.document_id}, "
                f"not the submitted document {receipt.document_id}"
            )
            record = None

        if record is not None:
            run.succeed(f"confirmed as document {record.document_id}", document_id=record.document_id)
            return record, True

        pending = NotYetConfirmed(f"Anchor for {cid} not confirmed: {reason}")
        issues.append(
            PublicationIssue(
                kind=type(pending).__name__,
                stage=PipelineStage.CONFIRM,
                message=str(pending),
            )
        )
        run.degrade(str(pending))
        fallback = AnchorRecord.from_receipt(
            receipt, name=artifact.name, cid=cid, timestamp=timestamp
        )
        return fallback, False

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    def publish_all(
        self,
        artifacts: Iterable[Artifact],
        *,
        spacing_seconds: float | None = None,
    ) -> list[Publication | ArtifactError]:
        """Publish *artifacts* one at a time, in order.

        A fatal failure of one artifact is reported as an ``ArtifactError``
        in its slot and never stops the batch. ``spacing_seconds`` overrides
        the configured delay between artifacts; ``0`` disables it.
        """
        self._ensure_manifest_open()
        spacing = (
            self.settings.batch_spacing_seconds
            if spacing_seconds is None
            else spacing_seconds
        )
        outcomes: list[Publication | ArtifactError] = []

        for index, artifact in enumerate(artifacts):
            if index and spacing > 0:
                self._sleep(spacing)
            try:
                outcomes.append(self.publish(artifact))
            except PipelineError as exc:
                logger.warning("Failed to publish %s: %s", artifact.name, exc)
                outcomes.append(self._artifact_error(exc))

        failed = sum(1 for o in outcomes if isinstance(o, ArtifactError))
        logger.info(
            "Batch complete: %d published, %d failed",
            len(outcomes) - failed,
            failed,
        )
        return outcomes

    def _ensure_manifest_open(self) -> None:
        if self.manifest.is_persisted:
            raise ManifestError(
                "Session manifest already saved; start a new Publisher to publish more artifacts"
            )

    @staticmethod
    def _artifact_error(exc: PipelineError) -> ArtifactError:
        # Plain PipelineErrors are named after their cause.
        if type(exc) is PipelineError and exc.cause is not None:
            error_type = type(exc.cause).__name__
        else:
            error_type = type(exc).__name__
        return ArtifactError(
            name=exc.artifact_name,
            stage=exc.stage,
            error_type=error_type,
            message=str(exc),
            checkpoint=exc.checkpoint,
        )

    # ------------------------------------------------------------------
    # Metadata and manifest
    # ------------------------------------------------------------------

    def pin_metadata(self, artifact: Artifact) -> dict[str, str]:
        """Key-values attached to a pin request for *artifact*."""
        metadata = {key: _stringify(value) for key, value in artifact.metadata.items()}
        metadata.setdefault("type", "document")
        metadata.update(
            {
                "name": artifact.name,
                "framework": self.settings.framework_identifier,
                "version": _stringify(
                    artifact.metadata.get("version", self.settings.framework_version)
                ),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )
        return metadata

    def generate_manifest(self) -> ManifestDocument:
        """Return the manifest document for the publications so far."""
        return self.manifest.to_document()

    def save_manifest(self, path: Path | str | None = None) -> ManifestDocument:
        """Persist the session manifest once, to *path* or the configured path."""
        return self.manifest.save(path or self.settings.manifest_path)


def _same_anchor(record: AnchorRecord, receipt: AnchorReceipt) -> bool:
    """Whether *record* is the ledger entry created by *receipt*."""
    return (
        record.document_id == receipt.document_id
        or record.transaction_ref == receipt.transaction_ref
    )


def _stringify(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
