"""Tests for the LocalContentStore — immutable, CID-addressed, idempotent."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from anchorpress.core.capabilities import ContentStore
from anchorpress.core.content_store import LocalContentStore
from anchorpress.core.errors import ContentNotFound, TransientNetworkError
from anchorpress.core.hasher import compute_cid, sha256_hex


class TestLocalContentStore:
    def test_satisfies_protocol(self, store: LocalContentStore):
        assert isinstance(store, ContentStore)

    def test_put_returns_cid_and_size(self, store: LocalContentStore):
        cid, size = store.put(b"hello world")
        assert cid == compute_cid(b"hello world")
        assert size == 11

    @pytest.mark.parametrize(
        "payload",
        [b"", b"\xff\x00\xfe\x80binary", bytes(range(256)) * 16384],
        ids=["empty", "binary", "4mib"],
    )
    def test_get_returns_stored_bytes(self, store: LocalContentStore, payload: bytes):
        cid, size = store.put(payload)
        assert cid == compute_cid(payload)
        assert size == len(payload)
        assert sha256_hex(store.get(cid)) == sha256_hex(payload)

    def test_put_is_idempotent(self, store: LocalContentStore):
        first = store.put(b"twice")
        second = store.put(b"twice")
        assert first == second

    def test_sharded_layout(self, store: LocalContentStore, tmp_dir: Path):
        store.put(b"layout")
        digest = sha256_hex(b"layout")
        expected = tmp_dir / "store" / digest[:2] / digest[2:4] / f"{digest}.dat"
        assert expected.read_bytes() == b"layout"

    def test_get_unknown_cid(self, store: LocalContentStore):
        with pytest.raises(ContentNotFound):
            store.get(compute_cid(b"never stored"))

    def test_get_malformed_cid(self, store: LocalContentStore):
        with pytest.raises(ContentNotFound):
            store.get("not-a-cid")

    def test_exists(self, store: LocalContentStore):
        cid, _ = store.put(b"present")
        assert store.exists(cid)
        assert not store.exists(compute_cid(b"absent"))
        assert not store.exists("garbage")

    def test_verify_detects_corruption(self, store: LocalContentStore, tmp_dir: Path):
        cid, _ = store.put(b"original")
        assert store.verify(cid)
        digest = sha256_hex(b"original")
        (tmp_dir / "store" / digest[:2] / digest[2:4] / f"{digest}.dat").write_bytes(b"changed")
        assert not store.verify(cid)

    def test_write_failure_is_transient(self, store: LocalContentStore, tmp_dir: Path):
        digest = sha256_hex(b"blocked")
        # A regular file where the shard directory should be.
        (tmp_dir / "store" / digest[:2]).write_bytes(b"")
        with pytest.raises(TransientNetworkError):
            store.put(b"blocked")

    def test_concurrent_puts_of_same_content(self, store: LocalContentStore, tmp_dir: Path):
        payload = b"shared" * 50_000
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: store.put(payload), range(16)))
        assert {cid for cid, _ in results} == {compute_cid(payload)}
        assert store.get(results[0][0]) == payload
        assert list((tmp_dir / "store").rglob("*.tmp")) == []
