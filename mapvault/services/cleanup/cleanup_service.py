"""Cleanup Service - best-effort removal of every active mapping."""

import logging
from typing import List, Optional

from ...core.exceptions import MapVaultError
from ...models import CleanupOutcome, DiscoveryScope
from ..discovery.drive_discovery import DriveDiscovery
from ..platform.base_mounter import BaseMounter
from ..restore.mount_error_classifier import summarize_output


class CleanupService:
    def __init__(
        self,
        discovery: DriveDiscovery,
        mounter: Optional[BaseMounter],
        dry_run: bool = False,
    ):
        self._discovery = discovery
        self._mounter = mounter
        self._dry_run = dry_run

    async def clear_all(self, scope: DiscoveryScope = DiscoveryScope.CURRENT_USER) -> List[CleanupOutcome]:
        mappings = await self._discovery.list_active_mappings(scope)
        outcomes = []

        for record in mappings:
            if self._dry_run:
                outcomes.append(CleanupOutcome(record=record, removed=False, message="would remove"))
                continue

            try:
                result = await self._mounter.unmount(record)
            except (MapVaultError, OSError) as e:
                logging.error(f"Failed to remove {record.display_name}: {e}")
                outcomes.append(CleanupOutcome(record=record, removed=False, message=str(e)))
                continue

            if result.success:
                outcomes.append(CleanupOutcome(record=record, removed=True))
            else:
                message = summarize_output(result.message) or f"exit code {result.exit_code}"
                logging.error(f"Failed to remove {record.display_name}: {message}")
                outcomes.append(CleanupOutcome(record=record, removed=False, message=message))

        removed = sum(1 for outcome in outcomes if outcome.removed)
        logging.info(f"Cleanup finished: {len(outcomes)} processed, {removed} removed")
        return outcomes
