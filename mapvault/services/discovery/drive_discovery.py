"""Drive Discovery - active mappings and shares visible on the network."""

import logging
from typing import Optional

from ...core.exceptions import MapVaultError
from ...models import DiscoveryScope, MappingRecord, MappingSet
from ..platform.base_mounter import BaseMounter
from .description_resolver import label_from_path


class DriveDiscovery:
    """Read-only enumeration of mappings. An unavailable mounter yields empty sets."""

    def __init__(self, mounter: Optional[BaseMounter]):
        self._mounter = mounter

    async def list_active_mappings(
        self, scope: DiscoveryScope = DiscoveryScope.CURRENT_USER
    ) -> MappingSet:
        if scope != DiscoveryScope.CURRENT_USER:
            logging.warning(
                f"Discovery scope '{scope.value}' is not supported, "
                f"using '{DiscoveryScope.CURRENT_USER.value}' instead"
            )

        mappings = MappingSet()
        if self._mounter is None:
            logging.warning("No drive mounter available on this platform - no mappings to discover")
            return mappings

        try:
            connections = await self._mounter.list_connections()
        except (MapVaultError, OSError) as e:
            logging.warning(f"Could not enumerate mapped drives: {e}")
            return mappings

        for record in connections:
            if not mappings.add(record):
                logging.debug(f"Skipping duplicate mapping {record.display_name}")

        logging.info(f"Discovered {len(mappings)} active mapping(s)")
        return mappings

    async def list_available_shares(self) -> MappingSet:
        shares = MappingSet()
        if self._mounter is None:
            logging.warning("No drive mounter available on this platform - skipping share discovery")
            return shares

        hosts = await self._enumerate_hosts()
        for host in hosts:
            try:
                share_names = await self._mounter.list_shares(host)
            except (MapVaultError, OSError, ValueError) as e:
                logging.warning(f"Skipping host {host}: {e}")
                continue

            for share in share_names:
                if share.upper() == "IPC$" or share.endswith("$"):
                    continue
                remote_path = f"\\\\{host}\\{share}"
                shares.add(
                    MappingRecord(
                        drive_letter="",
                        remote_path=remote_path,
                        description=label_from_path(remote_path),
                        persistent=True,
                    )
                )

        logging.info(f"Discovered {len(shares)} share(s) on {len(hosts)} host(s)")
        return shares

    async def _enumerate_hosts(self) -> list:
        hosts = []
        try:
            hosts = await self._mounter.list_hosts()
        except (MapVaultError, OSError, ValueError) as e:
            logging.warning(f"Primary host enumeration failed: {e}")

        if hosts:
            return hosts

        logging.info("No hosts from network browse list, trying neighbour table")
        try:
            return await self._mounter.list_hosts_fallback()
        except (MapVaultError, OSError, ValueError) as e:
            logging.warning(f"Fallback host enumeration failed: {e}")
            return []
