"""Credential stores keyed by host name. Secrets never leave these stores and memory."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

import keyring
from keyring.errors import KeyringError
from pydantic import SecretStr

from ...core.exceptions import CredentialStoreUnavailableError
from ...models import Credential


class CredentialStore(ABC):
    """External credential store. Both methods are blocking."""

    @abstractmethod
    def get(self, host: str) -> Optional[Credential]:
        """Stored credential for host, or None."""

    @abstractmethod
    def put(self, host: str, username: str, secret: str) -> None:
        """Store (or replace) the credential for host."""


class KeyringCredentialStore(CredentialStore):
    """
    Credential store on top of the keyring library (Windows Credential
    Manager on Windows).

    keyring looks passwords up by (service, username), so the username for a
    host is kept as its own entry under (service, host) and the secret under
    ("<service>:<host>", username).
    """

    def __init__(self, service_name: str = "mapvault"):
        self._service_name = service_name

    def get(self, host: str) -> Optional[Credential]:
        host = host.lower()
        try:
            username = keyring.get_password(self._service_name, host)
            if not username:
                return None
            secret = keyring.get_password(self._secret_service(host), username)
        except KeyringError as e:
            raise CredentialStoreUnavailableError(f"Credential store unavailable: {e}") from e

        if secret is None:
            logging.debug(f"Stored username for {host} has no secret")
            return None
        return Credential(username=username, secret=SecretStr(secret))

    def put(self, host: str, username: str, secret: str) -> None:
        host = host.lower()
        try:
            keyring.set_password(self._secret_service(host), username, secret)
            keyring.set_password(self._service_name, host, username)
        except KeyringError as e:
            raise CredentialStoreUnavailableError(f"Credential store unavailable: {e}") from e
        logging.info(f"Stored credential for {host} ({username})")

    def _secret_service(self, host: str) -> str:
        return f"{self._service_name}:{host}"


class InMemoryCredentialStore(CredentialStore):
    """Process-local store, used by tests and as an explicit no-persistence option."""

    def __init__(self, initial: Optional[Dict[str, Credential]] = None):
        self._credentials: Dict[str, Credential] = {
            host.lower(): credential for host, credential in (initial or {}).items()
        }

    def get(self, host: str) -> Optional[Credential]:
        return self._credentials.get(host.lower())

    def put(self, host: str, username: str, secret: str) -> None:
        self._credentials[host.lower()] = Credential(username=username, secret=SecretStr(secret))


class NullCredentialStore(CredentialStore):
    """Never finds or keeps anything (skip_credential_store)."""

    def get(self, host: str) -> Optional[Credential]:
        return None

    def put(self, host: str, username: str, secret: str) -> None:
        logging.debug(f"Credential store disabled, not storing credential for {host}")
