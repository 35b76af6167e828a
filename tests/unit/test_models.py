"""Tests for the frozen Pydantic models."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from anchorpress.core.hasher import compute_cid
from anchorpress.models import (
    AnchorReceipt,
    AnchorRecord,
    Artifact,
    CheckStatus,
    OverallStatus,
    PinRecord,
    PinStatus,
    PipelineCheckpoint,
    UploadResult,
    VerificationCheck,
    VerificationReport,
)


def _check(status: CheckStatus, name: str = "c") -> VerificationCheck:
    return VerificationCheck(name=name, status=status, message=status.value)


class TestArtifact:
    def test_frozen(self):
        artifact = Artifact(name="a", content=b"x")
        with pytest.raises(ValidationError):
            artifact.content = b"y"

    def test_from_path(self, tmp_path: Path):
        path = tmp_path / "charter.md"
        path.write_bytes(b"# Charter")
        artifact = Artifact.from_path(path, metadata={"type": "charter"})
        assert artifact.name == "charter.md"
        assert artifact.content == b"# Charter"
        assert artifact.size == 9
        assert artifact.metadata == {"type": "charter"}

    def test_from_path_with_name(self, tmp_path: Path):
        path = tmp_path / "c.md"
        path.write_bytes(b"")
        assert Artifact.from_path(path, name="Charter").name == "Charter"

    def test_repr_hides_content(self):
        assert "secret" not in repr(Artifact(name="a", content=b"secret"))


class TestPinRecord:
    def test_is_pinned(self):
        assert PinRecord(cid="b", status=PinStatus.PINNED).is_pinned
        assert not PinRecord(cid="b", status=PinStatus.PENDING).is_pinned


class TestAnchorRecord:
    def test_from_receipt(self):
        receipt = AnchorReceipt(document_id=7, transaction_ref="0xabc", confirmed_at_block=7)
        record = AnchorRecord.from_receipt(receipt, name="doc", cid="bafk", timestamp=99)
        assert record.document_id == 7
        assert record.transaction_ref == "0xabc"
        assert record.timestamp == 99
        assert record.anchored_by == ""


class TestCheckpoint:
    def test_cid_follows_upload(self):
        assert PipelineCheckpoint(artifact_name="a").cid is None
        upload = UploadResult(cid=compute_cid(b"a"), size=1, local_digest="0" * 64)
        assert PipelineCheckpoint(artifact_name="a", upload=upload).cid == upload.cid


class TestVerificationReport:
    def test_all_pass_is_verified(self):
        report = VerificationReport.from_checks("cid", [_check(CheckStatus.PASS)] * 3)
        assert report.is_verified
        assert report.summary.passed == 3

    def test_warning_and_error_do_not_fail(self):
        report = VerificationReport.from_checks(
            "cid",
            [_check(CheckStatus.PASS), _check(CheckStatus.WARNING), _check(CheckStatus.ERROR)],
        )
        assert report.overall_status == OverallStatus.VERIFIED
        assert (report.summary.warnings, report.summary.errors) == (1, 1)

    def test_any_fail_fails(self):
        report = VerificationReport.from_checks(
            "cid", [_check(CheckStatus.PASS), _check(CheckStatus.FAIL)]
        )
        assert report.overall_status == OverallStatus.FAILED
        assert report.summary.failed == 1
        assert report.summary.total == 2

    def test_check_lookup(self):
        report = VerificationReport.from_checks("cid", [_check(CheckStatus.PASS, "Pin Durability")])
        assert report.check("Pin Durability").status == CheckStatus.PASS
        with pytest.raises(KeyError):
            report.check("missing")
