from .credential_resolver import CredentialResolver, console_prompt
from .credential_store import (
    CredentialStore,
    InMemoryCredentialStore,
    KeyringCredentialStore,
    NullCredentialStore,
)
from .mount_error_classifier import MountErrorClassifier
from .restore_executor import RestoreExecutor

__all__ = [
    "CredentialResolver",
    "CredentialStore",
    "InMemoryCredentialStore",
    "KeyringCredentialStore",
    "MountErrorClassifier",
    "NullCredentialStore",
    "RestoreExecutor",
    "console_prompt",
]
