# mapvault/core/exceptions.py

from typing import Optional


class MapVaultError(Exception):
    """Base class for all mapvault errors."""


class BackupNotFoundError(MapVaultError):
    """Raised when a required backup file does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Backup file not found: {path}")


class MappingStoreError(MapVaultError):
    """Raised when a backup file cannot be written or parsed."""


class MountFailure(MapVaultError):
    """A mount call failed."""

    def __init__(self, remote_path: str, message: str, error_code: Optional[int] = None):
        self.remote_path = remote_path
        self.error_code = error_code
        super().__init__(f"Mount of {remote_path} failed: {message}")


class TransientMountFailure(MountFailure):
    """Mount failure that may succeed with explicit credentials."""


class PermanentMountFailure(MountFailure):
    """Mount failure that credentials cannot fix."""


class PartialDiscoveryFailure(MapVaultError):
    """Enumerating a single host or share failed."""

    def __init__(self, host: str, reason: str):
        self.host = host
        super().__init__(f"Discovery failed for {host}: {reason}")


class CommandUnavailableError(MapVaultError):
    """The OS command needed for an operation is not installed."""


class CommandTimeoutError(MapVaultError):
    """An OS command did not finish within its timeout."""


class CredentialStoreUnavailableError(MapVaultError):
    """The credential store backend cannot be used."""


class UnsupportedPlatformError(MapVaultError):
    """Raised when platform is not supported for drive mapping."""
