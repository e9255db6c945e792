import logging
from typing import Any, Dict, Optional

from .config import Settings
from .core.exceptions import UnsupportedPlatformError
from .services.cleanup.cleanup_service import CleanupService
from .services.discovery.description_resolver import DescriptionResolver
from .services.discovery.drive_discovery import DriveDiscovery
from .services.orchestrator import DriveMappingOrchestrator
from .services.platform.base_mounter import BaseMounter
from .services.platform.command_runner import CommandRunner
from .services.platform.platform_factory import PlatformFactory
from .services.restore.credential_resolver import CredentialResolver, console_prompt
from .services.restore.credential_store import (
    CredentialStore,
    KeyringCredentialStore,
    NullCredentialStore,
)
from .services.restore.restore_executor import RestoreExecutor
from .services.script.restore_script_generator import RestoreScriptGenerator
from .services.store.mapping_store import MappingStore
from .services.verify.access_verifier import AccessVerifier

# Global singleton instances
_singletons: Dict[str, Any] = {}


def get_settings() -> Settings:
    if "settings" not in _singletons:
        _singletons["settings"] = Settings()
    return _singletons["settings"]


def override_settings(settings: Settings) -> None:
    """Use these settings (e.g. with CLI overrides) for everything built afterwards."""
    reset_singletons()
    _singletons["settings"] = settings


def get_command_runner() -> CommandRunner:
    if "command_runner" not in _singletons:
        _singletons["command_runner"] = CommandRunner(get_settings().command_timeout_seconds)
    return _singletons["command_runner"]


def get_mounter() -> Optional[BaseMounter]:
    if "mounter" not in _singletons:
        try:
            mounter = PlatformFactory().create_mounter(get_command_runner())
            logging.debug(f"Initialized {mounter.get_platform_name()} mounter")
        except UnsupportedPlatformError as e:
            logging.warning(f"{e} - mapping operations are unavailable")
            mounter = None
        _singletons["mounter"] = mounter
    return _singletons["mounter"]


def get_credential_store() -> CredentialStore:
    if "credential_store" not in _singletons:
        settings = get_settings()
        if settings.skip_credential_store:
            _singletons["credential_store"] = NullCredentialStore()
        else:
            _singletons["credential_store"] = KeyringCredentialStore(settings.credential_service_name)
    return _singletons["credential_store"]


def get_credential_resolver() -> CredentialResolver:
    if "credential_resolver" not in _singletons:
        prompt = console_prompt if get_settings().prompt_for_credentials else None
        _singletons["credential_resolver"] = CredentialResolver(get_credential_store(), prompt)
    return _singletons["credential_resolver"]


def get_drive_discovery() -> DriveDiscovery:
    if "drive_discovery" not in _singletons:
        _singletons["drive_discovery"] = DriveDiscovery(get_mounter())
    return _singletons["drive_discovery"]


def get_description_resolver() -> DescriptionResolver:
    if "description_resolver" not in _singletons:
        _singletons["description_resolver"] = DescriptionResolver.for_windows(get_command_runner())
    return _singletons["description_resolver"]


def get_mapping_store() -> MappingStore:
    if "mapping_store" not in _singletons:
        _singletons["mapping_store"] = MappingStore()
    return _singletons["mapping_store"]


def get_restore_script_generator() -> RestoreScriptGenerator:
    if "restore_script_generator" not in _singletons:
        _singletons["restore_script_generator"] = RestoreScriptGenerator()
    return _singletons["restore_script_generator"]


def get_restore_executor() -> RestoreExecutor:
    if "restore_executor" not in _singletons:
        settings = get_settings()
        _singletons["restore_executor"] = RestoreExecutor(
            mounter=get_mounter(),
            credentials=get_credential_resolver(),
            dry_run=settings.dry_run,
            timeout_seconds=settings.restore_timeout_seconds,
            max_concurrency=settings.max_concurrent_restores,
        )
    return _singletons["restore_executor"]


def get_access_verifier() -> AccessVerifier:
    if "access_verifier" not in _singletons:
        settings = get_settings()
        _singletons["access_verifier"] = AccessVerifier(
            test_file_prefix=settings.access_test_file_prefix,
            timeout_seconds=settings.access_check_timeout_seconds,
        )
    return _singletons["access_verifier"]


def get_cleanup_service() -> CleanupService:
    if "cleanup_service" not in _singletons:
        _singletons["cleanup_service"] = CleanupService(
            discovery=get_drive_discovery(),
            mounter=get_mounter(),
            dry_run=get_settings().dry_run,
        )
    return _singletons["cleanup_service"]


def get_orchestrator() -> DriveMappingOrchestrator:
    if "orchestrator" not in _singletons:
        _singletons["orchestrator"] = DriveMappingOrchestrator(
            settings=get_settings(),
            discovery=get_drive_discovery(),
            resolver=get_description_resolver(),
            store=get_mapping_store(),
            generator=get_restore_script_generator(),
            executor=get_restore_executor(),
            verifier=get_access_verifier(),
            cleanup=get_cleanup_service(),
        )
    return _singletons["orchestrator"]


def reset_singletons() -> None:
    """Reset all singletons (for testing)."""
    _singletons.clear()
