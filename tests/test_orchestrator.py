"""
Tests for the backup/restore/test/clear flows wired together with FakeMounter.
"""

import json

import pytest

from mapvault.config import Settings
from mapvault.core.exceptions import BackupNotFoundError
from mapvault.models import MappingRecord, RestoreStatus
from mapvault.services.cleanup.cleanup_service import CleanupService
from mapvault.services.discovery.description_resolver import DescriptionResolver, PathLabelSource
from mapvault.services.discovery.drive_discovery import DriveDiscovery
from mapvault.services.orchestrator import DriveMappingOrchestrator
from mapvault.services.restore.credential_resolver import CredentialResolver
from mapvault.services.restore.credential_store import InMemoryCredentialStore
from mapvault.services.restore.restore_executor import RestoreExecutor
from mapvault.services.script.restore_script_generator import RestoreScriptGenerator
from mapvault.services.store.mapping_store import MappingStore
from mapvault.services.verify.access_verifier import AccessVerifier


@pytest.fixture
def settings(tmp_path):
    return Settings(
        backup_file_path=str(tmp_path / "backup" / "drive_mappings.json"),
        restore_script_path=str(tmp_path / "backup" / "Restore-DriveMappings.ps1"),
        log_file_path=str(tmp_path / "logs" / "mapvault.log"),
    )


@pytest.fixture
def orchestrator(settings, fake_mounter):
    discovery = DriveDiscovery(fake_mounter)
    return DriveMappingOrchestrator(
        settings=settings,
        discovery=discovery,
        resolver=DescriptionResolver([PathLabelSource()]),
        store=MappingStore(),
        generator=RestoreScriptGenerator(),
        executor=RestoreExecutor(fake_mounter, CredentialResolver(InMemoryCredentialStore(), None)),
        verifier=AccessVerifier(),
        cleanup=CleanupService(discovery, fake_mounter),
    )


class TestBackup:
    @pytest.mark.asyncio
    async def test_backup_writes_file_and_script(self, orchestrator, fake_mounter, settings):
        fake_mounter.connections = [MappingRecord(drive_letter="Z", remote_path="\\\\srv01\\data")]

        result = await orchestrator.backup()

        data = json.loads(open(settings.backup_file_path, encoding="utf-8").read())
        assert data == [
            {
                "DriveLetter": "Z",
                "RemotePath": "\\\\srv01\\data",
                "Description": "Data (Srv01)",
                "Persistent": True,
            }
        ]
        script = open(settings.restore_script_path, encoding="utf-8-sig").read()
        assert "-DriveLetter 'Z' -RemotePath '\\\\srv01\\data'" in script
        assert len(result.mappings) == 1

    @pytest.mark.asyncio
    async def test_backup_with_nothing_mapped(self, orchestrator, settings):
        result = await orchestrator.backup()

        assert len(result.mappings) == 0
        assert json.loads(open(settings.backup_file_path, encoding="utf-8").read()) == []

    @pytest.mark.asyncio
    async def test_available_shares_added_once(self, orchestrator, fake_mounter, settings):
        fake_mounter.connections = [MappingRecord(drive_letter="Z", remote_path="\\\\SRV01\\Data")]
        fake_mounter.hosts = ["srv01"]
        fake_mounter.shares = {"srv01": ["data", "public"]}

        result = await orchestrator.backup(include_available_shares=True)

        assert [(r.drive_letter, r.remote_path) for r in result.mappings] == [
            ("Z", "\\\\SRV01\\Data"),
            ("", "\\\\srv01\\public"),
        ]


class TestRestore:
    @pytest.mark.asyncio
    async def test_backup_clear_restore(self, orchestrator, fake_mounter):
        original = [
            MappingRecord(drive_letter="Z", remote_path="\\\\srv01\\data"),
            MappingRecord(drive_letter="H", remote_path="\\\\srv02\\home", persistent=False),
        ]
        fake_mounter.connections = list(original)

        await orchestrator.backup()
        cleared = await orchestrator.clear()
        report = await orchestrator.restore()

        assert all(o.removed for o in cleared)
        assert [o.status for o in report.outcomes] == [RestoreStatus.APPLIED, RestoreStatus.APPLIED]
        assert [c.key for c in fake_mounter.connections] == [r.key for r in original]

    @pytest.mark.asyncio
    async def test_restore_without_backup(self, orchestrator):
        with pytest.raises(BackupNotFoundError):
            await orchestrator.restore()

    @pytest.mark.asyncio
    async def test_precheck_is_informational(self, orchestrator, fake_mounter):
        fake_mounter.connections = [MappingRecord(drive_letter="Z", remote_path="\\\\srv01\\data")]
        await orchestrator.backup()
        await orchestrator.clear()

        report = await orchestrator.restore(verify_first=True)

        assert len(report.prechecks) == 1
        assert not report.prechecks[0].can_read
        assert report.outcomes[0].status == RestoreStatus.APPLIED


class TestAccessTest:
    @pytest.mark.asyncio
    async def test_reports_each_active_mapping(self, orchestrator, fake_mounter, tmp_path):
        fake_mounter.connections = [MappingRecord(remote_path=str(tmp_path))]

        reports = await orchestrator.test()

        assert len(reports) == 1
        assert reports[0].can_read and reports[0].can_write

    @pytest.mark.asyncio
    async def test_removes_stale_test_files(self, orchestrator, fake_mounter, tmp_path):
        (tmp_path / ".mapvault_access_test_leftover.tmp").write_text("x")
        (tmp_path / "keep.txt").write_text("x")
        fake_mounter.connections = [MappingRecord(remote_path=str(tmp_path))]

        await orchestrator.test()

        assert sorted(p.name for p in tmp_path.iterdir()) == ["keep.txt"]
