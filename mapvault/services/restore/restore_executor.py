"""
Restore Executor - applies mapping records to the live session.

Per record:
1. mount with ambient credentials
2. an existing identical mapping counts as success (checked up front for
   records without a drive letter, after a failed mount otherwise)
3. transient failures are retried once with a credential for the host
4. anything else is reported as failed; the batch always continues
"""

import asyncio
import logging
from collections import Counter
from typing import List, Optional

from ...core.exceptions import MountFailure, PermanentMountFailure
from ...models import Credential, MappingRecord, MappingSet, RestoreOutcome, RestoreStatus
from ...utils.unc import same_remote
from ..platform.base_mounter import BaseMounter
from .credential_resolver import CredentialResolver
from .mount_error_classifier import MountErrorClassifier


class RestoreExecutor:
    def __init__(
        self,
        mounter: Optional[BaseMounter],
        credentials: CredentialResolver,
        classifier: Optional[MountErrorClassifier] = None,
        dry_run: bool = False,
        timeout_seconds: float = 300.0,
        max_concurrency: int = 1,
    ):
        self._mounter = mounter
        self._credentials = credentials
        self._classifier = classifier or MountErrorClassifier()
        self._dry_run = dry_run
        self._timeout_seconds = timeout_seconds
        self._max_concurrency = max(1, max_concurrency)
        self._stop_requested = asyncio.Event()

    def request_stop(self) -> None:
        """Stop launching new records; records already running finish."""
        logging.warning("Stop requested - remaining mappings will be skipped")
        self._stop_requested.set()

    async def apply_all(self, mapping_set: MappingSet) -> List[RestoreOutcome]:
        records = mapping_set.records
        # One slot per record, written only by that record's worker
        outcomes: List[Optional[RestoreOutcome]] = [None] * len(records)
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def worker(index: int, record: MappingRecord) -> None:
            async with semaphore:
                if self._stop_requested.is_set():
                    outcomes[index] = RestoreOutcome(
                        record=record, status=RestoreStatus.SKIPPED, message="stop requested"
                    )
                    return
                outcomes[index] = await self.apply_bounded(record)

        await asyncio.gather(*(worker(index, record) for index, record in enumerate(records)))

        counts = Counter(outcome.status for outcome in outcomes)
        logging.info(
            f"Restore finished: {len(outcomes)} processed, "
            f"{counts[RestoreStatus.APPLIED]} applied, "
            f"{counts[RestoreStatus.ALREADY_SATISFIED]} already satisfied, "
            f"{counts[RestoreStatus.FAILED]} failed, "
            f"{counts[RestoreStatus.SKIPPED]} skipped"
        )
        return outcomes

    async def apply_bounded(self, record: MappingRecord) -> RestoreOutcome:
        """apply() with a timeout; nothing escapes except as a FAILED outcome."""
        try:
            outcome = await asyncio.wait_for(self.apply(record), timeout=self._timeout_seconds)
        except asyncio.TimeoutError:
            outcome = self._failed(record, f"timed out after {self._timeout_seconds:.0f}s")
        except Exception as e:
            logging.exception(f"Unexpected error restoring {record.display_name}")
            outcome = self._failed(record, f"unexpected error: {e}")

        self._log_outcome(outcome)
        return outcome

    async def apply(self, record: MappingRecord) -> RestoreOutcome:
        if self._mounter is None:
            return self._failed(record, "drive mapping is not supported on this platform")

        if self._dry_run:
            return RestoreOutcome(record=record, status=RestoreStatus.DRY_RUN, message="would mount")

        # 'net use \\host\share' succeeds again on an existing deviceless connection
        if not record.drive_letter and await self._already_satisfied(record):
            return self._already_mapped(record)

        try:
            await self._mount_or_raise(record)
            return RestoreOutcome(record=record, status=RestoreStatus.APPLIED)
        except MountFailure as failure:
            if await self._already_satisfied(record):
                return self._already_mapped(record)
            if isinstance(failure, PermanentMountFailure):
                return self._failed(record, str(failure))
            first_failure = failure

        host = record.host
        if not host:
            return self._failed(record, f"{first_failure} (cannot derive host from path)")

        resolved = await self._credentials.resolve(host)
        if resolved is None:
            return self._failed(record, f"{first_failure} (no credentials for {host})")

        try:
            await self._mount_or_raise(record, resolved.credential)
        except MountFailure as failure:
            if self._classifier.is_credential_rejection(failure.error_code):
                self._credentials.reject(host)
            return self._failed(record, str(failure), used_credentials=True)

        await self._credentials.confirm(host, resolved)
        return RestoreOutcome(
            record=record,
            status=RestoreStatus.APPLIED,
            message=f"as {resolved.credential.username}",
            used_credentials=True,
        )

    async def _mount_or_raise(self, record: MappingRecord, credential: Optional[Credential] = None) -> None:
        result = await self._mounter.mount(record, credential)
        if not result.success:
            raise self._classifier.to_failure(record, result)

    async def _already_satisfied(self, record: MappingRecord) -> bool:
        try:
            connections = await self._mounter.list_connections()
        except Exception as e:
            logging.debug(f"Could not list connections for idempotency check: {e}")
            return False

        return any(
            connection.drive_letter == record.drive_letter
            and same_remote(connection.remote_path, record.remote_path)
            for connection in connections
        )

    @staticmethod
    def _already_mapped(record: MappingRecord) -> RestoreOutcome:
        return RestoreOutcome(
            record=record,
            status=RestoreStatus.ALREADY_SATISFIED,
            message="already mapped to the same share",
        )

    @staticmethod
    def _failed(record: MappingRecord, message: str, used_credentials: bool = False) -> RestoreOutcome:
        return RestoreOutcome(
            record=record,
            status=RestoreStatus.FAILED,
            message=message,
            used_credentials=used_credentials,
        )

    @staticmethod
    def _log_outcome(outcome: RestoreOutcome) -> None:
        suffix = f" ({outcome.message})" if outcome.message else ""
        if outcome.status == RestoreStatus.FAILED:
            logging.error(f"{outcome.status.value}: {outcome.record.display_name}{suffix}")
        else:
            logging.info(f"{outcome.status.value}: {outcome.record.display_name}{suffix}")
