"""Pipeline events — emitted by the publisher and verifier to observers.

Observers (logging, terminal progress, audit sinks) subscribe to these
instead of the pipeline writing to the console itself.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from anchorpress.models.stages import PipelineStage


class EventKind(str, Enum):
    STAGE_STARTED = "stage_started"
    STAGE_SUCCEEDED = "stage_succeeded"
    STAGE_FAILED = "stage_failed"
    STAGE_DEGRADED = "stage_degraded"
    PUBLICATION_COMPLETED = "publication_completed"
    CHECK_COMPLETED = "check_completed"
    VERIFICATION_COMPLETED = "verification_completed"


class PipelineEvent(BaseModel):
    """A single observable step of a publication or verification."""

    model_config = ConfigDict(frozen=True)

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    kind: EventKind
    artifact_name: str = ""
    stage: PipelineStage | None = None
    cid: str | None = None
    message: str = ""
    details: dict[str, Any] = {}
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def is_failure(self) -> bool:
        return self.kind == EventKind.STAGE_FAILED
