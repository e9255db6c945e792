"""Windows Drive Mounter - net.exe and PowerShell based."""

import json
import logging
import re
from typing import List, Optional

from ...core.exceptions import CommandUnavailableError, PartialDiscoveryFailure
from ...models import Credential, MappingRecord, MountResult
from ...utils.unc import normalize_drive_letter
from .base_mounter import BaseMounter
from .command_runner import CommandResult, CommandRunner

# "System error 85 has occurred." (English) and its common translations
_SYSTEM_ERROR_RE = re.compile(
    r"(?:system error|systemfehler|systemfejl|erreur syst[eè]me)\s+(\d+)", re.IGNORECASE
)
# "OK           Z:        \\srv01\data        Microsoft Windows Network"
_NET_USE_LINE_RE = re.compile(r"(?:\b(?P<local>[A-Za-z]):\s+)?(?P<remote>\\\\\S.*?)(?:\s{2,}|$)")
# "Data          Disk                 Shared data"
_NET_VIEW_SHARE_RE = re.compile(r"^(?P<name>\S.*?)\s{2,}(?P<type>Disk)\b", re.IGNORECASE)

_LIST_MAPPINGS_SCRIPT = (
    "ConvertTo-Json -Compress -InputObject "
    "@(Get-SmbMapping | Select-Object LocalPath, RemotePath, Status)"
)
_LIST_NEIGHBOURS_SCRIPT = (
    "ConvertTo-Json -Compress -InputObject "
    "@(Get-NetNeighbor -AddressFamily IPv4 -State Reachable,Stale "
    "| Where-Object { $_.IPAddress -notmatch '^(224|239|255)\\.' } "
    "| Select-Object -ExpandProperty IPAddress -Unique)"
)


def parse_system_error(text: str) -> Optional[int]:
    match = _SYSTEM_ERROR_RE.search(text)
    return int(match.group(1)) if match else None


def _is_ipc_share(remote_path: str) -> bool:
    return remote_path.rstrip("\\").upper().endswith("\\IPC$")


class WindowsMounter(BaseMounter):
    """Windows-specific mapping implementation on top of net.exe and PowerShell."""

    def __init__(self, runner: CommandRunner):
        self._runner = runner

    async def list_connections(self) -> List[MappingRecord]:
        """Read mappings from Get-SmbMapping, falling back to parsing 'net use'."""
        try:
            result = await self._runner.run_powershell(_LIST_MAPPINGS_SCRIPT)
            if result.ok:
                return self._parse_smb_mappings(result.stdout)
            logging.debug(f"Get-SmbMapping failed ({result.returncode}), falling back to 'net use'")
        except CommandUnavailableError as e:
            logging.debug(f"PowerShell unavailable, falling back to 'net use': {e}")
        except (ValueError, TypeError) as e:
            logging.warning(f"Unreadable Get-SmbMapping output, falling back to 'net use': {e}")

        result = await self._runner.run(["net", "use"])
        if not result.ok:
            logging.warning(f"'net use' failed: {result.output}")
            return []
        return self._parse_net_use(result.stdout)

    async def mount(self, record: MappingRecord, credential: Optional[Credential] = None) -> MountResult:
        args = ["net", "use"]
        if record.drive_letter:
            args.append(f"{record.drive_letter}:")
        args.append(record.remote_path)
        if credential is not None:
            args.append(credential.secret.get_secret_value())
            args.append(f"/user:{credential.username}")
        if record.drive_letter:
            args.append(f"/persistent:{'yes' if record.persistent else 'no'}")

        logging.info(
            f"Mounting {record.display_name}"
            f"{' as ' + credential.username if credential else ''}"
        )
        return self._to_mount_result(await self._runner.run(args))

    async def unmount(self, record: MappingRecord) -> MountResult:
        target = f"{record.drive_letter}:" if record.drive_letter else record.remote_path
        logging.info(f"Removing mapping {record.display_name}")
        return self._to_mount_result(await self._runner.run(["net", "use", target, "/delete", "/y"]))

    async def list_hosts(self) -> List[str]:
        result = await self._runner.run(["net", "view"])
        if not result.ok:
            logging.debug(f"'net view' failed: {result.output}")
            return []

        hosts = []
        for line in result.stdout.splitlines():
            line = line.strip()
            if line.startswith("\\\\"):
                hosts.append(line[2:].split()[0])
        return hosts

    async def list_hosts_fallback(self) -> List[str]:
        result = await self._runner.run_powershell(_LIST_NEIGHBOURS_SCRIPT)
        if not result.ok or not result.stdout.strip():
            logging.debug(f"Get-NetNeighbor failed: {result.output}")
            return []

        data = json.loads(result.stdout)
        if isinstance(data, str):
            data = [data]
        return [str(address) for address in data if address]

    async def list_shares(self, host: str) -> List[str]:
        result = await self._runner.run(["net", "view", f"\\\\{host}"])
        if not result.ok:
            raise PartialDiscoveryFailure(host, result.output or f"exit code {result.returncode}")

        shares = []
        in_table = False
        for line in result.stdout.splitlines():
            if line.startswith("---"):
                in_table = True
                continue
            if not in_table or not line.strip():
                continue
            match = _NET_VIEW_SHARE_RE.match(line)
            if match:
                shares.append(match.group("name"))
        return shares

    def get_platform_name(self) -> str:
        return "Windows"

    def _parse_smb_mappings(self, stdout: str) -> List[MappingRecord]:
        if not stdout.strip():
            return []
        data = json.loads(stdout)
        if isinstance(data, dict):
            data = [data]

        records = []
        for item in data:
            remote = (item.get("RemotePath") or "").strip()
            if not remote or _is_ipc_share(remote):
                continue
            records.append(
                MappingRecord(
                    drive_letter=normalize_drive_letter(item.get("LocalPath") or ""),
                    remote_path=remote,
                    persistent=True,
                )
            )
        return records

    def _parse_net_use(self, stdout: str) -> List[MappingRecord]:
        records = []
        for line in stdout.splitlines():
            match = _NET_USE_LINE_RE.search(line.rstrip())
            if not match or _is_ipc_share(match.group("remote")):
                continue
            records.append(
                MappingRecord(
                    drive_letter=match.group("local") or "",
                    remote_path=match.group("remote"),
                    persistent=True,
                )
            )
        return records

    @staticmethod
    def _to_mount_result(result: CommandResult) -> MountResult:
        message = result.output
        return MountResult(
            success=result.ok,
            exit_code=result.returncode,
            error_code=None if result.ok else parse_system_error(message),
            message=message,
        )
