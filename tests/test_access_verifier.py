"""
Tests for AccessVerifier using real temporary directories.
"""

import os
from unittest.mock import patch

import pytest

from mapvault.models import MappingRecord, MappingSet
from mapvault.services.verify.access_verifier import AccessVerifier

PREFIX = ".mapvault_access_test_"


@pytest.fixture
def verifier():
    return AccessVerifier(test_file_prefix=PREFIX, timeout_seconds=5.0)


class TestVerify:
    @pytest.mark.asyncio
    async def test_writable_directory(self, verifier, tmp_path):
        report = await verifier.verify(str(tmp_path))

        assert report.can_read
        assert report.can_write
        assert report.error_message is None
        assert report.elapsed_ms >= 0
        assert os.listdir(tmp_path) == []

    @pytest.mark.asyncio
    async def test_missing_path(self, verifier, tmp_path):
        report = await verifier.verify(str(tmp_path / "missing"))

        assert not report.can_read
        assert not report.can_write
        assert "read failed" in report.error_message
        assert "write failed" in report.error_message

    @pytest.mark.asyncio
    async def test_read_only_share(self, verifier, tmp_path):
        (tmp_path / "existing.txt").write_text("x")

        with patch(
            "mapvault.services.verify.access_verifier.aiofiles.open",
            side_effect=PermissionError("Access is denied"),
        ):
            report = await verifier.verify(str(tmp_path))

        assert report.can_read
        assert not report.can_write
        assert "Access is denied" in report.error_message
        assert sorted(os.listdir(tmp_path)) == ["existing.txt"]


class TestTargets:
    def test_mounted_letter_uses_mount_point(self):
        record = MappingRecord(drive_letter="Z", remote_path="\\\\srv01\\data")
        active = MappingSet([record])

        assert AccessVerifier.target_for(record, active) == "Z:\\"

    def test_unmounted_record_uses_unc_path(self):
        record = MappingRecord(drive_letter="Z", remote_path="\\\\srv01\\data")

        assert AccessVerifier.target_for(record, MappingSet()) == "\\\\srv01\\data"

    def test_letter_mapped_to_other_share_uses_unc_path(self):
        record = MappingRecord(drive_letter="Z", remote_path="\\\\srv01\\data")
        active = MappingSet([MappingRecord(drive_letter="Z", remote_path="\\\\other\\stuff")])

        assert AccessVerifier.target_for(record, active) == "\\\\srv01\\data"

    @pytest.mark.asyncio
    async def test_verify_all_keeps_order(self, verifier, tmp_path):
        paths = []
        for name in ("a", "b", "c"):
            (tmp_path / name).mkdir()
            paths.append(str(tmp_path / name))
        records = [MappingRecord(remote_path=path) for path in paths]

        reports = await verifier.verify_all(records, MappingSet())

        assert [r.path for r in reports] == paths
        assert all(r.can_read and r.can_write for r in reports)


class TestCleanup:
    @pytest.mark.asyncio
    async def test_removes_only_stale_test_files(self, verifier, tmp_path):
        (tmp_path / f"{PREFIX}abc.tmp").write_text("x")
        (tmp_path / f"{PREFIX}def.tmp").write_text("x")
        (tmp_path / "report.tmp").write_text("x")

        assert await verifier.cleanup_stale_test_files(str(tmp_path)) == 2
        assert os.listdir(tmp_path) == ["report.tmp"]

    @pytest.mark.asyncio
    async def test_missing_directory(self, verifier, tmp_path):
        assert await verifier.cleanup_stale_test_files(str(tmp_path / "missing")) == 0
