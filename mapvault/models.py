from datetime import datetime
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from .utils.unc import host_of, normalize_drive_letter


class DiscoveryScope(str, Enum):
    """Which sessions' mappings discovery looks at."""

    CURRENT_USER = "current_user"
    MACHINE = "machine"  # Not supported, downgraded to CURRENT_USER


class RestoreStatus(str, Enum):
    """Per-record outcome of a restore."""

    APPLIED = "Applied"  # Mounted by this run
    ALREADY_SATISFIED = "AlreadySatisfied"  # Same remote already on the letter
    FAILED = "Failed"  # Mount failed, also after the credential retry
    DRY_RUN = "DryRun"  # Would have been mounted
    SKIPPED = "Skipped"  # Not started because a stop was requested


class MappingRecord(BaseModel):
    """
    One drive mapping: a local drive letter bound to a remote share.

    The serialized field names (DriveLetter, RemotePath, Description,
    Persistent) are the stable backup-file format. Credentials are never
    part of a record.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    drive_letter: str = Field(
        default="",
        alias="DriveLetter",
        description="Single drive letter without colon, empty for unmounted shares",
    )

    remote_path: str = Field(
        ..., alias="RemotePath", min_length=1, description="UNC path, e.g. \\\\host\\share"
    )

    description: str = Field(
        default="", alias="Description", description="Human readable label, may be empty"
    )

    persistent: bool = Field(
        default=True,
        alias="Persistent",
        description="Reconnect automatically at next logon",
    )

    @field_validator("drive_letter", mode="before")
    @classmethod
    def _normalize_letter(cls, value: Optional[str]) -> str:
        return normalize_drive_letter(value or "")

    @field_validator("description", mode="before")
    @classmethod
    def _description_never_none(cls, value: Optional[str]) -> str:
        return "" if value is None else value

    @field_validator("remote_path")
    @classmethod
    def _remote_path_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("RemotePath must not be blank")
        return value

    @property
    def key(self) -> Tuple[str, str]:
        """Natural key: (RemotePath, DriveLetter), remote compared case-insensitively."""
        return self.remote_path.casefold(), self.drive_letter

    @property
    def host(self) -> str:
        return host_of(self.remote_path)

    @property
    def display_name(self) -> str:
        if self.drive_letter:
            return f"{self.drive_letter}: -> {self.remote_path}"
        return self.remote_path

    def with_description(self, description: str) -> "MappingRecord":
        return self.model_copy(update={"description": description})


class MappingSet:
    """
    Ordered collection of MappingRecord.

    Order is insertion order. A record whose (RemotePath, DriveLetter) pair is
    already present is dropped by add().
    """

    def __init__(self, records: Iterable[MappingRecord] = ()):
        self._records: List[MappingRecord] = []
        self._keys: set = set()
        for record in records:
            self.add(record)

    def add(self, record: MappingRecord) -> bool:
        if record.key in self._keys:
            return False
        self._keys.add(record.key)
        self._records.append(record)
        return True

    @property
    def records(self) -> List[MappingRecord]:
        return list(self._records)

    def __iter__(self) -> Iterator[MappingRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, index: int) -> MappingRecord:
        return self._records[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MappingSet):
            return NotImplemented
        return self._records == other._records

    def __repr__(self) -> str:
        return f"MappingSet({self._records!r})"


class Credential(BaseModel):
    """Username/secret pair for one host. Lives in the credential store only."""

    model_config = ConfigDict(frozen=True)

    username: str
    secret: SecretStr


class MountResult(BaseModel):
    """Outcome of a single mount/unmount OS call."""

    success: bool
    exit_code: Optional[int] = None
    error_code: Optional[int] = Field(
        default=None, description="Windows system error number parsed from the output"
    )
    message: str = ""


class RestoreOutcome(BaseModel):
    record: MappingRecord
    status: RestoreStatus
    message: str = ""
    used_credentials: bool = False

    @property
    def ok(self) -> bool:
        return self.status not in (RestoreStatus.FAILED, RestoreStatus.SKIPPED)


class AccessReport(BaseModel):
    """Read/write reachability of a path plus how long the checks took."""

    path: str
    can_read: bool = False
    can_write: bool = False
    elapsed_ms: float = Field(default=0.0, ge=0.0)
    error_message: Optional[str] = None
    checked_at: datetime = Field(default_factory=datetime.now)


class CleanupOutcome(BaseModel):
    record: MappingRecord
    removed: bool
    message: str = ""
