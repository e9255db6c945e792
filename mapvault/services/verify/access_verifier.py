"""Access Verifier - read/write reachability of a mapped drive or UNC path."""

import asyncio
import logging
import os
import time
from typing import List, Optional, Sequence, Tuple
from uuid import uuid4

import aiofiles
import aiofiles.os

from ...models import AccessReport, MappingRecord, MappingSet
from ...utils.unc import mount_point, same_remote


class AccessVerifier:
    """
    Read check: list the immediate contents of the path.
    Write check: create a uniquely named temp file, then delete it.

    The checks are independent, so a read-only share reports can_read=True,
    can_write=False. elapsed_ms covers both checks together.
    """

    def __init__(
        self,
        test_file_prefix: str = ".mapvault_access_test_",
        timeout_seconds: float = 10.0,
        max_concurrency: int = 4,
    ):
        self._test_file_prefix = test_file_prefix
        self._timeout_seconds = timeout_seconds
        self._max_concurrency = max(1, max_concurrency)

    async def verify(self, path: str) -> AccessReport:
        logging.debug(f"Verifying access to {path}")
        started = time.perf_counter()

        can_read, read_error = await self._check_read_access(path)
        can_write, write_error = await self._check_write_access(path)

        elapsed_ms = (time.perf_counter() - started) * 1000
        errors = [error for error in (read_error, write_error) if error]

        return AccessReport(
            path=path,
            can_read=can_read,
            can_write=can_write,
            elapsed_ms=round(elapsed_ms, 2),
            error_message="; ".join(errors) if errors else None,
        )

    async def verify_record(self, record: MappingRecord, active: MappingSet) -> AccessReport:
        """Check the local mount point when the letter is mounted, the raw UNC path otherwise."""
        return await self.verify(self.target_for(record, active))

    async def verify_all(
        self, records: Sequence[MappingRecord], active: MappingSet
    ) -> List[AccessReport]:
        reports: List[Optional[AccessReport]] = [None] * len(records)
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def worker(index: int, record: MappingRecord) -> None:
            async with semaphore:
                reports[index] = await self.verify_record(record, active)

        await asyncio.gather(*(worker(index, record) for index, record in enumerate(records)))
        return reports

    @staticmethod
    def target_for(record: MappingRecord, active: MappingSet) -> str:
        if record.drive_letter and any(
            m.drive_letter == record.drive_letter and same_remote(m.remote_path, record.remote_path)
            for m in active
        ):
            return mount_point(record.drive_letter)
        return record.remote_path

    async def _check_read_access(self, path: str) -> Tuple[bool, Optional[str]]:
        try:
            entries = await asyncio.wait_for(aiofiles.os.listdir(path), timeout=self._timeout_seconds)
            logging.debug(f"Read access verified for {path} ({len(entries)} entries)")
            return True, None
        except asyncio.TimeoutError:
            logging.warning(f"Read check timed out for {path}")
            return False, f"read timed out after {self._timeout_seconds:.0f}s"
        except OSError as e:
            logging.debug(f"Read check failed for {path}: {e}")
            return False, f"read failed: {e}"

    async def _check_write_access(self, path: str) -> Tuple[bool, Optional[str]]:
        test_file_path = os.path.join(path, f"{self._test_file_prefix}{uuid4().hex}.tmp")

        try:
            await asyncio.wait_for(self._create_test_file(test_file_path), timeout=self._timeout_seconds)
        except asyncio.TimeoutError:
            logging.warning(f"Write check timed out for {path}")
            return False, f"write timed out after {self._timeout_seconds:.0f}s"
        except OSError as e:
            logging.debug(f"Write check failed for {path}: {e}")
            return False, f"write failed: {e}"

        try:
            await asyncio.wait_for(aiofiles.os.remove(test_file_path), timeout=self._timeout_seconds)
        except (asyncio.TimeoutError, OSError) as e:
            logging.warning(f"Could not remove test file {test_file_path}: {e}")
            return False, f"delete failed: {e or 'timed out'}"

        logging.debug(f"Write access verified for {path}")
        return True, None

    async def _create_test_file(self, test_file_path: str) -> None:
        async with aiofiles.open(test_file_path, "x") as f:
            await f.write("mapvault_access_test")

    async def cleanup_stale_test_files(self, directory: str) -> int:
        """Remove test files left behind by interrupted checks. Returns how many were removed."""
        cleaned_count = 0
        try:
            if not await aiofiles.os.path.isdir(directory):
                return 0

            for name in await aiofiles.os.listdir(directory):
                if not (name.startswith(self._test_file_prefix) and name.endswith(".tmp")):
                    continue
                try:
                    await aiofiles.os.remove(os.path.join(directory, name))
                    cleaned_count += 1
                except OSError as e:
                    logging.warning(f"Could not clean up old test file {name}: {e}")

            if cleaned_count > 0:
                logging.info(f"Cleaned up {cleaned_count} old test files from {directory}")
        except OSError as e:
            logging.error(f"Error during old test files cleanup in {directory}: {e}")

        return cleaned_count
