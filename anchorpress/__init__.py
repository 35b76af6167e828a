"""Anchorpress: content-addressed publication with ledger anchoring.

Documents are uploaded to a content store, pinned for durability,
re-verified byte-for-byte, anchored on an append-only ledger and
confirmed. Every stage reports through an event dispatcher, and a
session manifest records what was published.
"""

__version__ = "0.1.0"
__description__ = "Content-addressed publication pipeline with ledger anchoring"

from anchorpress.core.publisher import Publisher
from anchorpress.core.verifier import Verifier
from anchorpress.cli.app import app as cli

__all__ = ["Publisher", "Verifier", "cli", "__version__"]
