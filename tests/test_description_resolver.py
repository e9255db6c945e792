"""
Tests for the description cascade.
"""

from typing import Optional
from unittest.mock import AsyncMock

import pytest

from mapvault.services.discovery.description_resolver import (
    CimVolumeNameSource,
    DescriptionResolver,
    DescriptionSource,
    PathLabelSource,
    WmiVolumeNameSource,
    label_from_path,
)
from mapvault.services.platform.command_runner import CommandResult


class StaticSource(DescriptionSource):
    def __init__(self, name: str, value: Optional[str] = None, error: Optional[Exception] = None):
        self.name = name
        self.value = value
        self.error = error
        self.calls = []

    async def lookup(self, drive_letter: str, remote_path: str) -> Optional[str]:
        self.calls.append((drive_letter, remote_path))
        if self.error:
            raise self.error
        return self.value


class TestDescriptionResolver:
    @pytest.mark.asyncio
    async def test_first_non_empty_source_wins(self):
        sources = [
            StaticSource("registry", None),
            StaticSource("wmi", "   "),
            StaticSource("cim", "Data"),
            StaticSource("path", "Data (Srv01)"),
        ]
        resolver = DescriptionResolver(sources)

        assert await resolver.resolve("Z", "\\\\srv01\\data") == "Data"
        assert sources[3].calls == []

    @pytest.mark.asyncio
    async def test_failing_source_is_skipped(self):
        resolver = DescriptionResolver(
            [StaticSource("registry", error=OSError("access denied")), StaticSource("wmi", " Team ")]
        )
        assert await resolver.resolve("Z", "\\\\srv01\\data") == "Team"

    @pytest.mark.asyncio
    async def test_empty_when_nothing_found(self):
        resolver = DescriptionResolver([StaticSource("registry"), StaticSource("wmi", error=RuntimeError())])
        assert await resolver.resolve("Z", "\\\\srv01\\data") == ""

    @pytest.mark.asyncio
    async def test_letter_sources_skipped_without_letter(self):
        registry = StaticSource("registry", "Explorer label")
        resolver = DescriptionResolver([registry, PathLabelSource()])

        assert await resolver.resolve("", "\\\\srv01\\data") == "Data (Srv01)"
        assert registry.calls == []

    @pytest.mark.asyncio
    async def test_invalid_letter_does_not_raise(self):
        resolver = DescriptionResolver([StaticSource("registry", "x"), PathLabelSource()])
        assert await resolver.resolve("not-a-letter", "\\\\srv01\\data") == "Data (Srv01)"

    @pytest.mark.asyncio
    async def test_windows_cascade_order(self):
        runner = AsyncMock()
        resolver = DescriptionResolver.for_windows(runner)
        assert resolver.source_names == ["registry", "wmi", "cim", "path"]


class TestVolumeNameSources:
    @pytest.mark.asyncio
    async def test_cim_value_is_title_cased(self):
        runner = AsyncMock()
        runner.run_powershell.return_value = CommandResult(args=[], returncode=0, stdout="SHARED FILES\r\n")

        assert await CimVolumeNameSource(runner).lookup("Z", "\\\\srv01\\data") == "Shared Files"
        script = runner.run_powershell.call_args[0][0]
        assert "Get-CimInstance" in script
        assert "DeviceID='Z:'" in script

    @pytest.mark.asyncio
    async def test_wmi_value_is_kept(self):
        runner = AsyncMock()
        runner.run_powershell.return_value = CommandResult(args=[], returncode=0, stdout="SHARED\r\n")

        assert await WmiVolumeNameSource(runner).lookup("Z", "\\\\srv01\\data") == "SHARED"

    @pytest.mark.asyncio
    async def test_failed_query_returns_none(self):
        runner = AsyncMock()
        runner.run_powershell.return_value = CommandResult(args=[], returncode=1, stderr="not recognized")

        assert await WmiVolumeNameSource(runner).lookup("Z", "\\\\srv01\\data") is None


class TestLabelFromPath:
    def test_share_and_host(self):
        assert label_from_path("\\\\srv01\\data") == "Data (Srv01)"

    def test_deeper_path_uses_share(self):
        assert label_from_path("\\\\FILESRV\\PROJECTS\\2024") == "Projects (Filesrv)"

    def test_unparseable_path(self):
        assert label_from_path("C:\\local") == ""
