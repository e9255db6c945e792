"""
Tests for DriveDiscovery.
"""

import logging
from unittest.mock import AsyncMock

import pytest

from mapvault.core.exceptions import CommandUnavailableError
from mapvault.models import DiscoveryScope, MappingRecord
from mapvault.services.discovery.drive_discovery import DriveDiscovery


class TestActiveMappings:
    @pytest.mark.asyncio
    async def test_lists_connections(self, fake_mounter, sample_record):
        fake_mounter.connections = [
            sample_record,
            MappingRecord(drive_letter="H", remote_path="\\\\srv02\\home"),
        ]

        mappings = await DriveDiscovery(fake_mounter).list_active_mappings()

        assert [r.drive_letter for r in mappings] == ["Z", "H"]

    @pytest.mark.asyncio
    async def test_duplicates_are_collapsed(self, fake_mounter, sample_record):
        fake_mounter.connections = [sample_record, sample_record]

        assert len(await DriveDiscovery(fake_mounter).list_active_mappings()) == 1

    @pytest.mark.asyncio
    async def test_machine_scope_is_downgraded(self, fake_mounter, sample_record, caplog):
        fake_mounter.connections = [sample_record]

        with caplog.at_level(logging.WARNING):
            mappings = await DriveDiscovery(fake_mounter).list_active_mappings(DiscoveryScope.MACHINE)

        assert len(mappings) == 1
        assert "not supported" in caplog.text

    @pytest.mark.asyncio
    async def test_no_mounter_gives_empty_set(self):
        assert len(await DriveDiscovery(None).list_active_mappings()) == 0

    @pytest.mark.asyncio
    async def test_enumeration_failure_gives_empty_set(self):
        mounter = AsyncMock()
        mounter.list_connections.side_effect = CommandUnavailableError("net not found")

        assert len(await DriveDiscovery(mounter).list_active_mappings()) == 0


class TestAvailableShares:
    @pytest.mark.asyncio
    async def test_shares_from_browse_list(self, fake_mounter):
        fake_mounter.hosts = ["SRV01"]
        fake_mounter.shares = {"SRV01": ["Data", "IPC$", "ADMIN$", "Public"]}

        shares = await DriveDiscovery(fake_mounter).list_available_shares()

        assert [r.remote_path for r in shares] == ["\\\\SRV01\\Data", "\\\\SRV01\\Public"]
        assert all(r.drive_letter == "" for r in shares)
        assert shares[0].description == "Data (Srv01)"

    @pytest.mark.asyncio
    async def test_falls_back_to_neighbour_table(self, fake_mounter):
        fake_mounter.hosts = []
        fake_mounter.fallback_hosts = ["192.168.1.20"]
        fake_mounter.shares = {"192.168.1.20": ["media"]}

        shares = await DriveDiscovery(fake_mounter).list_available_shares()

        assert [r.remote_path for r in shares] == ["\\\\192.168.1.20\\media"]

    @pytest.mark.asyncio
    async def test_failing_host_is_skipped(self, fake_mounter):
        fake_mounter.hosts = ["DOWN", "SRV01"]
        fake_mounter.failing_hosts = {"DOWN"}
        fake_mounter.shares = {"SRV01": ["Data"]}

        shares = await DriveDiscovery(fake_mounter).list_available_shares()

        assert [r.remote_path for r in shares] == ["\\\\SRV01\\Data"]

    @pytest.mark.asyncio
    async def test_primary_enumeration_error_uses_fallback(self):
        mounter = AsyncMock()
        mounter.list_hosts.side_effect = OSError("browser service stopped")
        mounter.list_hosts_fallback.return_value = ["nas"]
        mounter.list_shares.return_value = ["backup"]

        shares = await DriveDiscovery(mounter).list_available_shares()

        assert [r.remote_path for r in shares] == ["\\\\nas\\backup"]
