"""
Pytest configuration and shared fixtures.
"""

import asyncio
from typing import Dict, List, Optional, Tuple

import pytest

from mapvault.dependencies import reset_singletons
from mapvault.models import Credential, MappingRecord, MountResult
from mapvault.services.platform.base_mounter import BaseMounter
from mapvault.core.exceptions import PartialDiscoveryFailure


def mount_error(code: int, text: str) -> MountResult:
    return MountResult(
        success=False,
        exit_code=2,
        error_code=code,
        message=f"System error {code} has occurred.\n\n{text}\n",
    )


class FakeMounter(BaseMounter):
    """
    In-memory stand-in for the Windows mounter.

    behaviour per remote path (case-insensitive):
      "ok"                 mounts with ambient credentials
      "needs_credentials"  access denied until valid credentials are given
      "unreachable"        network path not found
      "explode"            raises RuntimeError
    """

    def __init__(self, connections: Optional[List[MappingRecord]] = None):
        self.connections: List[MappingRecord] = list(connections or [])
        self.behaviour: Dict[str, str] = {}
        self.valid_credentials: Dict[str, Tuple[str, str]] = {}
        self.mount_delay: Dict[str, float] = {}
        self.unmount_failures: set = set()
        self.mount_calls: List[Tuple[MappingRecord, Optional[Credential]]] = []
        self.unmount_calls: List[MappingRecord] = []
        self.hosts: List[str] = []
        self.fallback_hosts: List[str] = []
        self.shares: Dict[str, List[str]] = {}
        self.failing_hosts: set = set()

    async def list_connections(self) -> List[MappingRecord]:
        return list(self.connections)

    async def mount(self, record: MappingRecord, credential: Optional[Credential] = None) -> MountResult:
        self.mount_calls.append((record, credential))
        key = record.remote_path.casefold()

        delay = self.mount_delay.get(key)
        if delay:
            await asyncio.sleep(delay)

        mode = self.behaviour.get(key, "ok")
        if mode == "explode":
            raise RuntimeError("mount driver crashed")

        if record.drive_letter and any(c.drive_letter == record.drive_letter for c in self.connections):
            return mount_error(85, "The local device name is already in use.")

        if mode == "unreachable":
            return mount_error(53, "The network path was not found.")

        if mode == "needs_credentials":
            if credential is None:
                return mount_error(5, "Access is denied.")
            expected = self.valid_credentials.get(record.host.casefold())
            if expected != (credential.username, credential.secret.get_secret_value()):
                return mount_error(86, "The specified network password is not correct.")

        self.connections.append(record.with_description(""))
        return MountResult(success=True, exit_code=0, message="The command completed successfully.")

    async def unmount(self, record: MappingRecord) -> MountResult:
        self.unmount_calls.append(record)
        if record.remote_path.casefold() in self.unmount_failures:
            return mount_error(2250, "This network connection does not exist.")
        self.connections = [c for c in self.connections if c.key != record.key]
        return MountResult(success=True, exit_code=0)

    async def list_hosts(self) -> List[str]:
        return list(self.hosts)

    async def list_hosts_fallback(self) -> List[str]:
        return list(self.fallback_hosts)

    async def list_shares(self, host: str) -> List[str]:
        if host in self.failing_hosts:
            raise PartialDiscoveryFailure(host, "System error 53 has occurred.")
        return list(self.shares.get(host, []))

    def get_platform_name(self) -> str:
        return "Fake"


@pytest.fixture(autouse=True)
def clean_singletons():
    """Automatically reset singletons before each test."""
    reset_singletons()
    yield
    reset_singletons()


@pytest.fixture
def fake_mounter():
    return FakeMounter()


@pytest.fixture
def sample_record():
    return MappingRecord(drive_letter="Z", remote_path="\\\\srv01\\data", description="", persistent=True)
