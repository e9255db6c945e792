"""
Description Resolver - human readable labels for drive mappings.

None of the Windows metadata sources is reliably populated for every
mapping, so labels come from a cascade where each source is only asked
when the previous ones produced nothing:

1. Explorer's per-drive label override in the registry
2. Legacy WMI (Get-WmiObject Win32_LogicalDisk) volume name
3. CIM (Get-CimInstance Win32_LogicalDisk) volume name, title-cased
4. A label derived from the UNC path itself: "Share (Host)"
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ...utils.unc import normalize_drive_letter, parse_unc, to_title_case
from ..platform.command_runner import CommandRunner


class DescriptionSource(ABC):
    """One metadata source in the resolver cascade."""

    name: str = "source"
    requires_letter: bool = True

    @abstractmethod
    async def lookup(self, drive_letter: str, remote_path: str) -> Optional[str]:
        """Return a label, or None/empty when this source knows nothing."""


class RegistryLabelSource(DescriptionSource):
    """HKCU ...\\Explorer\\DriveIcons\\<L>\\DefaultLabel, set by 'Rename' in Explorer."""

    name = "registry"
    KEY_TEMPLATE = r"Software\Microsoft\Windows\CurrentVersion\Explorer\DriveIcons\{letter}\DefaultLabel"

    async def lookup(self, drive_letter: str, remote_path: str) -> Optional[str]:
        return await asyncio.to_thread(self._read_label, drive_letter)

    def _read_label(self, drive_letter: str) -> Optional[str]:
        try:
            import winreg
        except ImportError:
            return None

        try:
            with winreg.OpenKey(winreg.HKEY_CURRENT_USER, self.KEY_TEMPLATE.format(letter=drive_letter)) as key:
                value, reg_type = winreg.QueryValueEx(key, "")
                if reg_type in (winreg.REG_SZ, winreg.REG_EXPAND_SZ) and value:
                    return str(value)
                return None
        except FileNotFoundError:
            return None


class WmiVolumeNameSource(DescriptionSource):
    """Volume name reported by the legacy WMI cmdlets (Windows PowerShell only)."""

    name = "wmi"
    QUERY = "Get-WmiObject -Class Win32_LogicalDisk -Filter \"DeviceID='{letter}:'\""

    def __init__(self, runner: CommandRunner):
        self._runner = runner

    async def lookup(self, drive_letter: str, remote_path: str) -> Optional[str]:
        # drive_letter is validated A-Z by the resolver before it gets here
        script = f"({self.QUERY.format(letter=drive_letter)}).VolumeName"
        result = await self._runner.run_powershell(script)
        if not result.ok:
            logging.debug(f"{self.name} query failed for {drive_letter}: {result.output}")
            return None
        return self._transform(result.stdout.strip())

    def _transform(self, volume_name: str) -> str:
        return volume_name


class CimVolumeNameSource(WmiVolumeNameSource):
    """Volume name from the CIM cmdlets, converted to title case."""

    name = "cim"
    QUERY = "Get-CimInstance -ClassName Win32_LogicalDisk -Filter \"DeviceID='{letter}:'\""

    def _transform(self, volume_name: str) -> str:
        return to_title_case(volume_name)


class PathLabelSource(DescriptionSource):
    """\\\\srv01\\data -> 'Data (Srv01)'."""

    name = "path"
    requires_letter = False

    async def lookup(self, drive_letter: str, remote_path: str) -> Optional[str]:
        return label_from_path(remote_path)


def label_from_path(remote_path: str) -> str:
    try:
        host, share = parse_unc(remote_path)
    except ValueError:
        return ""
    return f"{to_title_case(share)} ({to_title_case(host)})"


class DescriptionResolver:
    """Runs the description cascade. resolve() never raises."""

    def __init__(self, sources: Sequence[DescriptionSource]):
        self._sources: List[DescriptionSource] = list(sources)

    @classmethod
    def for_windows(cls, runner: CommandRunner) -> "DescriptionResolver":
        return cls(
            [
                RegistryLabelSource(),
                WmiVolumeNameSource(runner),
                CimVolumeNameSource(runner),
                PathLabelSource(),
            ]
        )

    @property
    def source_names(self) -> List[str]:
        return [source.name for source in self._sources]

    async def resolve(self, drive_letter: str, remote_path: str) -> str:
        try:
            drive_letter = normalize_drive_letter(drive_letter)
        except ValueError:
            logging.debug(f"Ignoring invalid drive letter {drive_letter!r} for {remote_path}")
            drive_letter = ""

        for source in self._sources:
            if source.requires_letter and not drive_letter:
                continue
            try:
                value = await source.lookup(drive_letter, remote_path)
            except Exception as e:
                logging.debug(f"Description source '{source.name}' failed for {remote_path}: {e}")
                continue

            if value and value.strip():
                logging.debug(f"Description for {remote_path} from '{source.name}': {value.strip()}")
                return value.strip()

        return ""
