"""Session manifest — append-only record of successful publications.

Entries are appended under a lock so concurrent publishers cannot
interleave writes. The manifest is persisted once, at the end of the
session, as a single JSON document.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path

from anchorpress.core.errors import ManifestError
from anchorpress.models.publication import ManifestDocument, Publication

logger = logging.getLogger(__name__)


class SessionManifest:
    """Ordered, append-only sequence of publications for one session.

    Parameters
    ----------
    framework:
        Framework name written into the manifest header.
    version:
        Framework version written into the manifest header.
    """

    def __init__(self, framework: str, version: str) -> None:
        self.framework = framework
        self.version = version
        self._lock = threading.Lock()
        self._publications: list[Publication] = []
        self._persisted_to: Path | None = None

    def append(self, publication: Publication) -> int:
        """Append *publication* and return its position."""
        with self._lock:
            if self._persisted_to is not None:
                raise ManifestError(
                    f"Manifest already persisted to {self._persisted_to}; "
                    "start a new session to publish more artifacts"
                )
            self._publications.append(publication)
            return len(self._publications) - 1

    @property
    def publications(self) -> list[Publication]:
        with self._lock:
            return list(self._publications)

    @property
    def is_persisted(self) -> bool:
        return self._persisted_to is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._publications)

    def to_document(self, published_at: datetime | None = None) -> ManifestDocument:
        """Build the manifest document from the current entries."""
        return self._build(self.publications, published_at)

    def _build(
        self, publications: list[Publication], published_at: datetime | None
    ) -> ManifestDocument:
        return ManifestDocument(
            framework=self.framework,
            version=self.version,
            published_at=published_at or datetime.now(timezone.utc),
            total_artifacts=len(publications),
            artifacts=[p.to_manifest_entry() for p in publications],
        )

    def save(self, path: Path | str) -> ManifestDocument:
        """Write the manifest to *path* as one JSON document.

        The file is written to a temporary sibling and renamed into place,
        so readers never see a partial manifest.

        Raises
        ------
        ManifestError
            If this session's manifest was already saved.
        """
        path = Path(path)
        with self._lock:
            if self._persisted_to is not None:
                raise ManifestError(f"Manifest already persisted to {self._persisted_to}")
            document = self._build(list(self._publications), None)
            write_json_atomic(path, document.model_dump(mode="json"))
            self._persisted_to = path

        logger.info("Manifest with %d artifact(s) saved to %s", document.total_artifacts, path)
        return document


def write_json_atomic(path: Path, payload: object) -> None:
    """Write *payload* as indented JSON via temp file + rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f".{path.name}.tmp")
    tmp.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    tmp.replace(path)


def load_manifest(path: Path | str) -> ManifestDocument:
    """Read a manifest file written by ``SessionManifest.save``."""
    return ManifestDocument.model_validate_json(Path(path).read_text(encoding="utf-8"))
