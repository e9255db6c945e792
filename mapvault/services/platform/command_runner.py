"""Async subprocess wrapper shared by everything that talks to the OS."""

import asyncio
import logging
import shutil
import sys
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ...core.exceptions import CommandTimeoutError, CommandUnavailableError

# Forces PowerShell to emit UTF-8 so JSON output survives non-ASCII share names
POWERSHELL_UTF8_PREAMBLE = "[Console]::OutputEncoding = [System.Text.Encoding]::UTF8; "


@dataclass
class CommandResult:
    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stdout and stderr together; net.exe splits its messages over both."""
        return "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)


def _decode(data: Optional[bytes], encoding: str) -> str:
    if not data:
        return ""
    return data.decode(encoding, errors="replace")


class CommandRunner:
    """Runs OS commands without a shell, with a timeout and no stdin."""

    def __init__(self, timeout_seconds: float = 30.0):
        self._timeout_seconds = timeout_seconds
        # Console tools such as net.exe write in the OEM code page
        self._console_encoding = "oem" if sys.platform == "win32" else "utf-8"

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    async def run(
        self,
        args: Sequence[str],
        timeout: Optional[float] = None,
        encoding: Optional[str] = None,
    ) -> CommandResult:
        args = list(args)
        timeout = timeout if timeout is not None else self._timeout_seconds
        logging.debug(f"Running command: {self._redact(args)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise CommandUnavailableError(f"Command not available: {args[0]} ({e})") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            logging.warning(f"Command timed out after {timeout:.0f}s: {args[0]}")
            process.kill()
            await process.wait()
            raise CommandTimeoutError(f"{args[0]} did not finish within {timeout:.0f}s")

        encoding = encoding or self._console_encoding
        return CommandResult(
            args=args,
            returncode=process.returncode,
            stdout=_decode(stdout, encoding),
            stderr=_decode(stderr, encoding),
        )

    async def run_powershell(self, script: str, timeout: Optional[float] = None) -> CommandResult:
        args = [
            self.powershell_executable(),
            "-NoProfile",
            "-NonInteractive",
            "-Command",
            POWERSHELL_UTF8_PREAMBLE + script,
        ]
        return await self.run(args, timeout=timeout, encoding="utf-8")

    @staticmethod
    def powershell_executable() -> str:
        return shutil.which("powershell") or shutil.which("pwsh") or "powershell"

    @staticmethod
    def _redact(args: List[str]) -> str:
        """Hide the password of 'net use [L:] \\\\host\\share <password> /user:x'."""
        redacted = list(args)
        if not any(arg.lower().startswith("/user:") for arg in redacted):
            return " ".join(redacted)
        # The password is the positional argument right after the remote path
        for index, arg in enumerate(redacted[:-1]):
            if arg.startswith("\\\\"):
                if not redacted[index + 1].lower().startswith("/user:"):
                    redacted[index + 1] = "********"
                break
        return " ".join(redacted)
