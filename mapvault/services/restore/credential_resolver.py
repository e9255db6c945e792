"""
Credential Resolver - finds credentials for a host during a restore batch.

Lookup order is the credential store, then one interactive prompt per host
per batch. Resolution is serialized per host, so records of the same host
never trigger two prompts at once; later records reuse the first answer.
Prompts for different hosts are serialized too, since they share a terminal.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Set

from pydantic import SecretStr
from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt

from ...core.exceptions import CredentialStoreUnavailableError
from ...models import Credential
from .credential_store import CredentialStore

CredentialPrompt = Callable[[str], Optional[Credential]]


def console_prompt(host: str) -> Optional[Credential]:
    """Blocking username/password prompt on the terminal. Empty username cancels."""
    console = Console(stderr=True)
    console.print(f"[bold]Credentials required for [cyan]{escape(host)}[/cyan][/bold]")
    username = Prompt.ask("Username", console=console, default="", show_default=False)
    if not username:
        return None
    secret = Prompt.ask("Password", console=console, password=True)
    return Credential(username=username, secret=SecretStr(secret))


@dataclass
class ResolvedCredential:
    credential: Credential
    from_prompt: bool = False
    cacheable: bool = False  # False when the store was unavailable at lookup time
    stored: bool = False


class CredentialResolver:
    def __init__(self, store: CredentialStore, prompt: Optional[CredentialPrompt] = console_prompt):
        self._store = store
        self._prompt = prompt
        self._locks: Dict[str, asyncio.Lock] = {}
        # One terminal: prompts for different hosts must not interleave
        self._prompt_lock = asyncio.Lock()
        self._session: Dict[str, Optional[ResolvedCredential]] = {}
        self._prompted: Set[str] = set()

    async def resolve(self, host: str) -> Optional[ResolvedCredential]:
        key = host.casefold()
        async with self._lock_for(key):
            if key in self._session:
                return self._session[key]

            resolved = None
            store_available = True
            try:
                credential = await asyncio.to_thread(self._store.get, host)
            except CredentialStoreUnavailableError as e:
                logging.warning(f"{e} - falling back to prompt without caching")
                credential = None
                store_available = False

            if credential is not None:
                logging.info(f"Using stored credential for {host} ({credential.username})")
                resolved = ResolvedCredential(credential=credential)
            elif self._prompt is not None and key not in self._prompted:
                self._prompted.add(key)
                async with self._prompt_lock:
                    credential = await asyncio.to_thread(self._prompt, host)
                if credential is not None:
                    resolved = ResolvedCredential(
                        credential=credential, from_prompt=True, cacheable=store_available
                    )
            else:
                logging.info(f"No credential available for {host}")

            self._session[key] = resolved
            return resolved

    async def confirm(self, host: str, resolved: ResolvedCredential) -> None:
        """The credential worked: write a prompted one back to the store, once."""
        if not resolved.from_prompt or not resolved.cacheable or resolved.stored:
            return
        resolved.stored = True
        credential = resolved.credential
        try:
            await asyncio.to_thread(
                self._store.put, host, credential.username, credential.secret.get_secret_value()
            )
        except CredentialStoreUnavailableError as e:
            logging.warning(f"Could not store credential for {host}: {e}")

    def reject(self, host: str) -> None:
        """The host refused the credential: no further attempts for it in this batch."""
        logging.warning(f"Credential for {host} was rejected")
        self._session[host.casefold()] = None

    def _lock_for(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]
