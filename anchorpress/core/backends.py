"""Factory for the local reference backends described by a settings object."""

from __future__ import annotations

from typing import NamedTuple

from anchorpress.config import PublishSettings
from anchorpress.core.anchor_ledger import AnchorLedger
from anchorpress.core.content_store import LocalContentStore
from anchorpress.core.pinning import LocalPinRegistry


class LocalBackends(NamedTuple):
    store: LocalContentStore
    pins: LocalPinRegistry
    ledger: AnchorLedger


def open_local_backends(settings: PublishSettings) -> LocalBackends:
    """Open (creating if needed) the store, pin registry and ledger."""
    store = LocalContentStore(settings.store_path)
    pins = LocalPinRegistry(settings.pin_registry_path, content_store=store)
    ledger = AnchorLedger(settings.ledger_path, anchored_by=settings.anchored_by)
    return LocalBackends(store=store, pins=pins, ledger=ledger)
