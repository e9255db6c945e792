"""
Drive Mapping Orchestrator - the four user-facing flows.

Backup  = discovery -> descriptions -> store.save -> restore script
Restore = store.load -> (optional access pre-check) -> restore executor
Test    = discovery -> access verifier
Clear   = discovery -> cleanup
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..config import Settings
from ..models import AccessReport, CleanupOutcome, MappingSet, RestoreOutcome
from ..utils.unc import same_remote
from .cleanup.cleanup_service import CleanupService
from .discovery.description_resolver import DescriptionResolver
from .discovery.drive_discovery import DriveDiscovery
from .restore.restore_executor import RestoreExecutor
from .script.restore_script_generator import RestoreScriptGenerator
from .store.mapping_store import MappingStore
from .verify.access_verifier import AccessVerifier


@dataclass
class BackupResult:
    mappings: MappingSet
    backup_path: str
    script_path: str


@dataclass
class RestoreReport:
    outcomes: List[RestoreOutcome]
    prechecks: List[AccessReport] = field(default_factory=list)


class DriveMappingOrchestrator:
    def __init__(
        self,
        settings: Settings,
        discovery: DriveDiscovery,
        resolver: DescriptionResolver,
        store: MappingStore,
        generator: RestoreScriptGenerator,
        executor: RestoreExecutor,
        verifier: AccessVerifier,
        cleanup: CleanupService,
    ):
        self._settings = settings
        self._discovery = discovery
        self._resolver = resolver
        self._store = store
        self._generator = generator
        self._executor = executor
        self._verifier = verifier
        self._cleanup = cleanup

    @property
    def executor(self) -> RestoreExecutor:
        return self._executor

    async def backup(
        self,
        backup_path: Optional[str] = None,
        script_path: Optional[str] = None,
        include_available_shares: Optional[bool] = None,
    ) -> BackupResult:
        backup_path = backup_path or self._settings.backup_file_path
        script_path = script_path or self._settings.restore_script_path
        if include_available_shares is None:
            include_available_shares = self._settings.include_available_shares

        active = await self._discovery.list_active_mappings(self._settings.discovery_scope)

        mappings = MappingSet()
        for record in active:
            description = await self._resolver.resolve(record.drive_letter, record.remote_path)
            mappings.add(record.with_description(description))

        if include_available_shares:
            for share in await self._discovery.list_available_shares():
                if any(same_remote(share.remote_path, record.remote_path) for record in mappings):
                    continue
                mappings.add(share)

        await self._store.save(mappings, backup_path)
        await self._generator.write(mappings, script_path)
        logging.info(f"Backup complete: {len(mappings)} mapping(s)")
        return BackupResult(mappings=mappings, backup_path=backup_path, script_path=script_path)

    async def restore(
        self, backup_path: Optional[str] = None, verify_first: Optional[bool] = None
    ) -> RestoreReport:
        backup_path = backup_path or self._settings.backup_file_path
        if verify_first is None:
            verify_first = self._settings.verify_before_restore

        mappings = await self._store.load(backup_path)

        prechecks = []
        if verify_first:
            active = await self._discovery.list_active_mappings(self._settings.discovery_scope)
            prechecks = await self._verifier.verify_all(mappings.records, active)
            await self._cleanup_test_files(prechecks)
            for report in prechecks:
                if not report.can_read:
                    # Informational: the share may only need the credentials restore supplies
                    logging.warning(f"Pre-check: {report.path} not readable yet ({report.error_message})")

        outcomes = await self._executor.apply_all(mappings)
        return RestoreReport(outcomes=outcomes, prechecks=prechecks)

    async def test(self) -> List[AccessReport]:
        active = await self._discovery.list_active_mappings(self._settings.discovery_scope)
        reports = await self._verifier.verify_all(active.records, active)
        await self._cleanup_test_files(reports)
        logging.info(f"Access test finished for {len(reports)} mapping(s)")
        return reports

    async def clear(self) -> List[CleanupOutcome]:
        return await self._cleanup.clear_all(self._settings.discovery_scope)

    async def _cleanup_test_files(self, reports: List[AccessReport]) -> None:
        """Remove access-test files an earlier timed-out write check left behind."""
        for path in dict.fromkeys(report.path for report in reports if report.can_read):
            await self._verifier.cleanup_stale_test_files(path)
