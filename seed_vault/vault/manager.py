"""
VaultManager — Lifecycle of the encrypted recovery phrase.

Provides the public API used by the application layer:
- ``create_or_unlock_vault(user_id, passphrase, mnemonic_factory)``
- ``change_passphrase(user_id, old_passphrase, new_passphrase)``

Steps run strictly in order: nothing is re-encrypted before a successful
decrypt, and the record store is written only once the new blob is fully
assembled in memory. An abandoned call therefore leaves no partial state.

Security Note:
    Never log passphrases, mnemonics, peppers or ciphertext values. Only
    log user ids, vault names and operations.
"""
import logging
from typing import Any, Callable, NamedTuple, Optional

from .blob import CipherBlob
from .config import ScryptParams, VaultConfig
from .crypto import (
    VaultKey,
    decrypt,
    derive_encryption_key,
    derive_hardened_key,
    encrypt,
    generate_salt,
)
from .exceptions import AuthenticationFailed, Conflict, InvalidParameter, NoVault, NotFound
from .pepper import PepperProvider, SessionContext
from .temp_passphrase import TempPassphrase

logger = logging.getLogger("seed_vault.vault")


class VaultUnlockResult(NamedTuple):
    mnemonic: str
    created: bool


class VaultManager:
    """Creates, unlocks and re-keys the mnemonic vault of a user.

    The manager is stateless between calls and holds no locks; concurrent
    creation is resolved by the store's conflict-detecting insert.

    Args:
        store: Record store adapter (``read_blob``/``write_blob``/``replace_blob``).
        pepper_provider: Source of the server-held pepper.
        config: Cost parameters, HKDF info and vault name.
        session: Authenticated session handed to the pepper provider.
        temp_passphrase: Optional helper whose flag is cleared after a
            successful passphrase change.
    """

    def __init__(
        self,
        store: Any,
        pepper_provider: PepperProvider,
        *,
        config: Optional[VaultConfig] = None,
        session: Optional[SessionContext] = None,
        temp_passphrase: Optional[TempPassphrase] = None,
    ):
        self._store = store
        self._pepper = pepper_provider
        self._config = config or VaultConfig()
        self.session = session
        self._temp = temp_passphrase

    @property
    def vault_name(self) -> str:
        return self._config.vault_name

    # ------------------------------------------------------------------
    # Key pipeline
    # ------------------------------------------------------------------

    async def _derive_key(
        self, passphrase: str, salt: bytes, params: ScryptParams, pepper: bytes
    ) -> VaultKey:
        hardened = await derive_hardened_key(passphrase, salt, params)
        return derive_encryption_key(hardened, pepper, self._config.hkdf_info)

    async def _open(self, blob: CipherBlob, passphrase: str, pepper: bytes) -> str:
        """Decrypt a blob with its own stored salt and cost parameters."""
        key = await self._derive_key(passphrase, blob.salt, blob.params, pepper)
        return decrypt(key, blob.iv, blob.ciphertext).decode("utf-8")

    async def _seal(self, mnemonic: str, passphrase: str, pepper: bytes) -> CipherBlob:
        """Encrypt a mnemonic under a brand-new salt and the current defaults."""
        params = self._config.scrypt
        salt = generate_salt()
        key = await self._derive_key(passphrase, salt, params, pepper)
        payload = encrypt(key, mnemonic.encode("utf-8"))
        return CipherBlob.build(params, salt, payload)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def create_or_unlock_vault(
        self,
        user_id: str,
        passphrase: str,
        mnemonic_factory: Callable[[], str],
    ) -> VaultUnlockResult:
        """Create the vault on first use, otherwise unlock it.

        Args:
            user_id: Owner of the vault.
            passphrase: User passphrase (never stored).
            mnemonic_factory: Only source of a new mnemonic; called only
                when no vault exists yet.

        Returns:
            VaultUnlockResult(mnemonic, created).

        Raises:
            AuthenticationFailed: Wrong passphrase, wrong pepper or tampered data.
            InvalidParameter: Empty user id/passphrase or empty mnemonic.
            StoreError: Record store failures, propagated unchanged.
            PepperUnavailable: No pepper and no development fallback.
        """
        if not user_id:
            raise InvalidParameter("user_id must not be empty")
        if not passphrase:
            raise InvalidParameter("Passphrase must be a non-empty string")
        name = self.vault_name

        try:
            blob = await self._store.read_blob(user_id, name)
        except NotFound:
            blob = None

        pepper = await self._pepper.get_pepper(self.session)

        if blob is None:
            mnemonic = mnemonic_factory()
            if not isinstance(mnemonic, str) or not mnemonic:
                raise InvalidParameter("mnemonic_factory must return a non-empty string")
            new_blob = await self._seal(mnemonic, passphrase, pepper)
            try:
                await self._store.write_blob(user_id, name, new_blob)
            except Conflict:
                logger.info(
                    "Vault created concurrently: user=%s name=%s; unlocking instead",
                    user_id, name,
                )
                blob = await self._store.read_blob(user_id, name)
            else:
                logger.info("Vault created: user=%s name=%s", user_id, name)
                return VaultUnlockResult(mnemonic=mnemonic, created=True)

        try:
            mnemonic = await self._open(blob, passphrase, pepper)
        except AuthenticationFailed:
            logger.warning("Vault unlock failed: user=%s name=%s", user_id, name)
            raise
        logger.debug("Vault unlocked: user=%s name=%s", user_id, name)
        return VaultUnlockResult(mnemonic=mnemonic, created=False)

    async def change_passphrase(
        self, user_id: str, old_passphrase: str, new_passphrase: str
    ) -> None:
        """Re-encrypt the mnemonic under a new passphrase.

        A new salt is always generated and cost parameters are refreshed
        to the configured defaults. The stored blob is replaced only after
        the new one is complete.

        Raises:
            NoVault: If the user has no vault.
            AuthenticationFailed: If the old passphrase is wrong.
            InvalidParameter: If the new passphrase is empty.
            StoreError: Record store failures, propagated unchanged.
        """
        if not new_passphrase:
            raise InvalidParameter("New passphrase must be a non-empty string")
        name = self.vault_name
        try:
            blob = await self._store.read_blob(user_id, name)
        except NotFound as err:
            raise NoVault(f"No vault {name!r} for user {user_id}") from err

        pepper = await self._pepper.get_pepper(self.session)
        try:
            mnemonic = await self._open(blob, old_passphrase, pepper)
        except AuthenticationFailed:
            logger.warning("Passphrase change rejected: user=%s name=%s", user_id, name)
            raise

        new_blob = await self._seal(mnemonic, new_passphrase, pepper)
        await self._store.replace_blob(user_id, name, new_blob)
        logger.info("Vault passphrase changed: user=%s name=%s", user_id, name)

        if self._temp is not None:
            await self._temp.mark_passphrase_as_user_set()
