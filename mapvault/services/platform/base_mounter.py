"""Abstract Base Mounter - interface for platform-specific drive operations."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ...models import Credential, MappingRecord, MountResult


class BaseMounter(ABC):
    """Abstract base class for platform-specific mapping operations."""

    @abstractmethod
    async def list_connections(self) -> List[MappingRecord]:
        """Active remote connections of the current session (persistent=True provisionally)."""

    @abstractmethod
    async def mount(self, record: MappingRecord, credential: Optional[Credential] = None) -> MountResult:
        """Mount record.remote_path at record.drive_letter."""

    @abstractmethod
    async def unmount(self, record: MappingRecord) -> MountResult:
        """Remove the mapping and release the drive letter."""

    @abstractmethod
    async def list_hosts(self) -> List[str]:
        """Hosts visible in the network neighbourhood (primary source)."""

    @abstractmethod
    async def list_hosts_fallback(self) -> List[str]:
        """Secondary host enumeration, used when list_hosts() finds nothing."""

    @abstractmethod
    async def list_shares(self, host: str) -> List[str]:
        """Disk share names of a host. Raises PartialDiscoveryFailure on error."""

    @abstractmethod
    def get_platform_name(self) -> str:
        """Get platform name for logging."""
