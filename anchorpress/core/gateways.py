"""Retrieval URLs derived deterministically from a CID."""

from __future__ import annotations

from collections.abc import Iterable

CONTENT_URI_SCHEME = "ipfs"


def content_uri(cid: str) -> str:
    """Return the scheme URI for *cid*, e.g. ``ipfs://bafk...``."""
    return f"{CONTENT_URI_SCHEME}://{cid}"


def gateway_urls(cid: str, templates: Iterable[str]) -> list[str]:
    """Format every ``{cid}`` template with *cid*, preserving template order."""
    return [template.format(cid=cid) for template in templates]
