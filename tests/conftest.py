"""Shared test fixtures for anchorpress."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from anchorpress.config import PublishSettings
from anchorpress.core.anchor_ledger import AnchorLedger
from anchorpress.core.content_store import LocalContentStore
from anchorpress.core.errors import AnchorRejected, TransientNetworkError
from anchorpress.core.events import EventDispatcher, EventRecorder
from anchorpress.core.pinning import LocalPinRegistry
from anchorpress.core.publisher import Publisher
from anchorpress.core.verifier import Verifier
from anchorpress.models.anchors import AnchorReceipt, AnchorRecord
from anchorpress.models.artifacts import Artifact, PinRecord

FIXED_EPOCH = 1_700_000_000


# ---------------------------------------------------------------------------
# Local backends
# ---------------------------------------------------------------------------


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test data."""
    return tmp_path


@pytest.fixture
def store(tmp_dir: Path) -> LocalContentStore:
    """Provide a fresh LocalContentStore in a temp directory."""
    return LocalContentStore(tmp_dir / "store")


@pytest.fixture
def pins(tmp_dir: Path, store: LocalContentStore) -> LocalPinRegistry:
    """Provide a pin registry that consults the test store."""
    return LocalPinRegistry(tmp_dir / "pins.db", content_store=store)


@pytest.fixture
def ledger(tmp_dir: Path) -> AnchorLedger:
    """Provide a fresh AnchorLedger backed by a temp SQLite database."""
    return AnchorLedger(tmp_dir / "ledger.db", anchored_by="test-suite")


@pytest.fixture
def settings(tmp_dir: Path) -> PublishSettings:
    """Settings pointing at the temp directory, with no batch spacing."""
    return PublishSettings(
        store_path=tmp_dir / "store",
        pin_registry_path=tmp_dir / "pins.db",
        ledger_path=tmp_dir / "ledger.db",
        manifest_path=tmp_dir / "manifest.json",
        batch_spacing_seconds=0,
    )


@pytest.fixture
def fixed_epoch() -> int:
    """Seconds since the epoch returned by the test clock."""
    return FIXED_EPOCH


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def dispatcher(recorder: EventRecorder) -> EventDispatcher:
    return EventDispatcher([recorder])


@pytest.fixture
def make_publisher(
    store: LocalContentStore,
    pins: LocalPinRegistry,
    ledger: AnchorLedger,
    settings: PublishSettings,
    dispatcher: EventDispatcher,
) -> Callable[..., Publisher]:
    """Factory fixture: a Publisher on the local backends, any of which can be swapped."""

    def _factory(**overrides) -> Publisher:
        return Publisher(
            overrides.pop("store", store),
            overrides.pop("pins", pins),
            overrides.pop("ledger", ledger),
            overrides.pop("settings", settings),
            dispatcher=overrides.pop("dispatcher", dispatcher),
            clock=overrides.pop("clock", lambda: FIXED_EPOCH),
            **overrides,
        )

    return _factory


@pytest.fixture
def publisher(make_publisher: Callable[..., Publisher]) -> Publisher:
    return make_publisher()


@pytest.fixture
def make_verifier(
    store: LocalContentStore,
    pins: LocalPinRegistry,
    ledger: AnchorLedger,
    settings: PublishSettings,
    dispatcher: EventDispatcher,
) -> Callable[..., Verifier]:
    """Factory fixture: a Verifier on the local backends, any of which can be swapped."""

    def _factory(**overrides) -> Verifier:
        return Verifier(
            overrides.pop("store", store),
            overrides.pop("pins", pins),
            overrides.pop("ledger", ledger),
            overrides.pop("settings", settings),
            dispatcher=overrides.pop("dispatcher", dispatcher),
        )

    return _factory


@pytest.fixture
def verifier(make_verifier: Callable[..., Verifier]) -> Verifier:
    return make_verifier()


@pytest.fixture
def charter() -> Artifact:
    return Artifact(
        name="charter.md",
        content=b"# Charter\n\nThe framework is published openly.\n",
        metadata={"type": "charter", "critical": True},
    )


@pytest.fixture
def make_artifact() -> Callable[..., Artifact]:
    """Factory fixture: build an Artifact whose content derives from its name."""

    def _factory(name: str = "doc.txt", content: bytes | None = None, **metadata) -> Artifact:
        return Artifact(
            name=name,
            content=content if content is not None else f"contents of {name}".encode(),
            metadata=metadata,
        )

    return _factory


# ---------------------------------------------------------------------------
# Failure-injecting capability doubles
# ---------------------------------------------------------------------------


class FlakyStore:
    """Delegates to a real store but refuses uploads of selected payloads."""

    def __init__(self, inner: LocalContentStore, fail_on: set[bytes]) -> None:
        self.inner = inner
        self.fail_on = fail_on
        self.put_calls = 0

    def put(self, data: bytes) -> tuple[str, int]:
        self.put_calls += 1
        if data in self.fail_on:
            raise TransientNetworkError("gateway timeout")
        return self.inner.put(data)

    def get(self, cid: str) -> bytes:
        return self.inner.get(cid)


class CorruptingStore:
    """Stores faithfully but serves altered bytes on retrieval."""

    def __init__(self, inner: LocalContentStore) -> None:
        self.inner = inner

    def put(self, data: bytes) -> tuple[str, int]:
        return self.inner.put(data)

    def get(self, cid: str) -> bytes:
        return self.inner.get(cid) + b"\x00tampered"


class UnavailableStore:
    """Every call fails as if the store were unreachable."""

    def put(self, data: bytes) -> tuple[str, int]:
        raise TransientNetworkError("store unreachable")

    def get(self, cid: str) -> bytes:
        raise TransientNetworkError("store unreachable")


class FailingPins:
    """Pinning service that is down for both pin and status."""

    def __init__(self) -> None:
        self.pin_calls = 0

    def pin(self, cid: str, metadata: dict[str, str]) -> PinRecord:
        self.pin_calls += 1
        raise TransientNetworkError("pinning service returned 503")

    def status(self, cid: str) -> PinRecord | None:
        raise TransientNetworkError("pinning service returned 503")


class LaggingLedger:
    """Accepts anchors but never reflects them in lookups."""

    def __init__(self, inner: AnchorLedger) -> None:
        self.inner = inner

    def anchor(self, name: str, cid: str, timestamp: int) -> AnchorReceipt:
        return self.inner.anchor(name, cid, timestamp)

    def lookup_by_cid(self, cid: str) -> AnchorRecord | None:
        return None

    def lookup_by_id(self, document_id: int) -> AnchorRecord:
        return self.inner.lookup_by_id(document_id)


class StaleLedger:
    """Lookups only see anchors up to a fixed document id, like a lagging replica."""

    def __init__(self, inner: AnchorLedger, visible_up_to: int) -> None:
        self.inner = inner
        self.visible_up_to = visible_up_to

    def anchor(self, name: str, cid: str, timestamp: int) -> AnchorReceipt:
        return self.inner.anchor(name, cid, timestamp)

    def lookup_by_cid(self, cid: str) -> AnchorRecord | None:
        visible = [r for r in self.inner.history(cid) if r.document_id <= self.visible_up_to]
        return visible[-1] if visible else None

    def lookup_by_id(self, document_id: int) -> AnchorRecord:
        return self.inner.lookup_by_id(document_id)


class RejectingLedger:
    """Reverts every anchor submission."""

    def __init__(self) -> None:
        self.anchor_calls = 0

    def anchor(self, name: str, cid: str, timestamp: int) -> AnchorReceipt:
        self.anchor_calls += 1
        raise AnchorRejected("execution reverted: out of gas")

    def lookup_by_cid(self, cid: str) -> AnchorRecord | None:
        return None

    def lookup_by_id(self, document_id: int) -> AnchorRecord:
        raise AnchorRejected("ledger offline")


@pytest.fixture
def corrupting_store(store: LocalContentStore) -> CorruptingStore:
    return CorruptingStore(store)


@pytest.fixture
def unavailable_store() -> UnavailableStore:
    return UnavailableStore()


@pytest.fixture
def failing_pins() -> FailingPins:
    return FailingPins()


@pytest.fixture
def lagging_ledger(ledger: AnchorLedger) -> LaggingLedger:
    return LaggingLedger(ledger)


@pytest.fixture
def make_stale_ledger(ledger: AnchorLedger) -> Callable[..., StaleLedger]:
    def _factory(visible_up_to: int) -> StaleLedger:
        return StaleLedger(ledger, visible_up_to)

    return _factory


@pytest.fixture
def rejecting_ledger() -> RejectingLedger:
    return RejectingLedger()


@pytest.fixture
def make_flaky_store(store: LocalContentStore) -> Callable[..., FlakyStore]:
    def _factory(*fail_on: bytes) -> FlakyStore:
        return FlakyStore(store, set(fail_on))

    return _factory
