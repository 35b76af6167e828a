"""Error taxonomy for publication and verification.

Capability errors are raised by content store, pinning and ledger adapters.
Pipeline errors are fatal stage failures and carry the failing stage, the
underlying cause and a checkpoint of everything obtained so far. The
non-fatal kinds are never raised out of the publisher; they are recorded as
``PublicationIssue`` entries on the returned ``Publication``.
"""

from __future__ import annotations

from anchorpress.models.publication import PipelineCheckpoint
from anchorpress.models.stages import PipelineStage


class PublishError(RuntimeError):
    """Base class for every anchorpress error."""


# ---------------------------------------------------------------------------
# Capability errors
# ---------------------------------------------------------------------------


class CapabilityError(PublishError):
    """Raised by an external capability adapter."""


class TransientNetworkError(CapabilityError):
    """A store, pinning service or ledger is temporarily unreachable.

    Safe to retry later; never retried inside a single pipeline run.
    """


class ContentNotFound(CapabilityError):
    """The content store affirmatively does not hold the requested CID."""


class AnchorRejected(CapabilityError):
    """The ledger rejected or reverted an anchor submission."""


class AnchorNotFound(CapabilityError):
    """The ledger has no document with the requested id."""


Unavailable = TransientNetworkError
NotFound = ContentNotFound


# ---------------------------------------------------------------------------
# Fatal pipeline errors
# ---------------------------------------------------------------------------


class PipelineError(PublishError):
    """A fatal stage failure.

    Attributes
    ----------
    stage:
        The stage that failed.
    cause:
        The underlying exception, if any (also set as ``__cause__``).
    checkpoint:
        Results obtained before the failure, for resuming without
        re-uploading.
    """

    def __init__(
        self,
        message: str,
        *,
        stage: PipelineStage,
        checkpoint: PipelineCheckpoint,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.stage = stage
        self.checkpoint = checkpoint
        self.cause = cause

    @property
    def artifact_name(self) -> str:
        return self.checkpoint.artifact_name

    @property
    def cid(self) -> str | None:
        return self.checkpoint.cid

    def __str__(self) -> str:
        base = super().__str__()
        if self.cause is not None:
            return f"[{self.stage.value}] {base}: {self.cause}"
        return f"[{self.stage.value}] {base}"


class IntegrityMismatch(PipelineError):
    """Retrieved content does not hash to the digest taken before upload."""

    def __init__(
        self,
        message: str,
        *,
        checkpoint: PipelineCheckpoint,
        cause: BaseException | None = None,
        expected_digest: str = "",
        actual_digest: str | None = None,
    ) -> None:
        super().__init__(
            message,
            stage=PipelineStage.INTEGRITY_CHECK,
            checkpoint=checkpoint,
            cause=cause,
        )
        self.expected_digest = expected_digest
        self.actual_digest = actual_digest


class LedgerRejection(PipelineError):
    """The anchor submission failed. The checkpoint keeps the upload result."""

    def __init__(
        self,
        message: str,
        *,
        checkpoint: PipelineCheckpoint,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            message,
            stage=PipelineStage.ANCHOR,
            checkpoint=checkpoint,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Non-fatal conditions (recorded, not raised)
# ---------------------------------------------------------------------------


class NotYetConfirmed(PublishError):
    """An anchor was accepted but the ledger does not show it yet."""


class PinningDegraded(PublishError):
    """The publication proceeds without a durability guarantee."""


# ---------------------------------------------------------------------------
# Local invariants
# ---------------------------------------------------------------------------


class InvalidTransitionError(PublishError):
    """Raised when a requested pipeline state transition is not valid."""


class ManifestError(PublishError):
    """Raised when the session manifest is misused (e.g. saved twice)."""


class LedgerIntegrityError(PublishError):
    """Raised when the anchor ledger's hash chain is broken."""
