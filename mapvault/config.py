from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import DiscoveryScope
from .utils.host_config import get_hostname_settings_file


class Settings(BaseSettings):
    # Backup artefacts
    backup_file_path: str = "backup/drive_mappings.json"
    restore_script_path: str = "backup/Restore-DriveMappings.ps1"

    # Discovery
    discovery_scope: DiscoveryScope = DiscoveryScope.CURRENT_USER
    include_available_shares: bool = False  # Also back up visible, unmounted shares

    # Restore behaviour
    skip_credential_store: bool = False
    prompt_for_credentials: bool = True
    credential_service_name: str = "mapvault"  # Service name used in the OS vault
    dry_run: bool = False
    verify_before_restore: bool = False
    max_concurrent_restores: int = 1  # 1 = strictly sequential
    restore_timeout_seconds: float = 300.0  # Includes time spent at a credential prompt

    # OS command / access checks
    command_timeout_seconds: float = 30.0
    access_check_timeout_seconds: float = 10.0
    access_test_file_prefix: str = ".mapvault_access_test_"

    # Logging
    log_level: str = "INFO"
    log_file_path: str = "logs/mapvault.log"
    log_retention_days: int = 30

    model_config = SettingsConfigDict(
        env_prefix="MAPVAULT_",
        env_file=get_hostname_settings_file(),
        extra="ignore",
    )

    @property
    def log_directory(self) -> Path:
        return Path(self.log_file_path).parent
