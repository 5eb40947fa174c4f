"""
Temporary passphrase — lets a vault exist before the user picks a passphrase.

A random 256-bit value is kept in the OS-backed secure storage together with
a flag saying it was generated, not chosen. Nothing here touches the remote
record store.
"""
import base64
import logging
import secrets
from typing import Optional, Protocol, runtime_checkable

logger = logging.getLogger("seed_vault.vault")

K_TEMP_FLAG = "hihodl::pass_is_temp_v1"
K_TEMP_SECRET = "hihodl::pass_temp_secret_v1"

TEMP_PASSPHRASE_BYTES = 32


@runtime_checkable
class SecureStorage(Protocol):
    """Tamper-resistant string storage provided by the platform keystore."""

    async def get_item(self, key: str) -> Optional[str]:
        ...

    async def set_item(self, key: str, value: str) -> None:
        ...

    async def delete_item(self, key: str) -> None:
        ...


class InMemorySecureStorage:
    """Process-local :class:`SecureStorage` for tests and development."""

    def __init__(self):
        self._items: dict[str, str] = {}

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def delete_item(self, key: str) -> None:
        self._items.pop(key, None)


class TempPassphrase:
    """Generates and tracks the onboarding passphrase."""

    def __init__(self, storage: SecureStorage):
        self._storage = storage

    async def get_or_create_temp_passphrase(self) -> str:
        """Return the stored temporary passphrase, creating it on first call."""
        existing = await self._storage.get_item(K_TEMP_SECRET)
        if existing:
            return existing
        raw = secrets.token_bytes(TEMP_PASSPHRASE_BYTES)
        passphrase = base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")
        await self._storage.set_item(K_TEMP_SECRET, passphrase)
        await self._storage.set_item(K_TEMP_FLAG, "1")
        logger.info("Generated temporary vault passphrase")
        return passphrase

    async def is_using_temp_passphrase(self) -> bool:
        return (await self._storage.get_item(K_TEMP_FLAG)) == "1"

    async def mark_passphrase_as_user_set(self) -> None:
        """Clear the temporary flag once the user chose a real passphrase."""
        await self._storage.delete_item(K_TEMP_FLAG)
