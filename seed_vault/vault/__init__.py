"""Seed Vault — At-rest protection of a wallet recovery phrase.

Security Note (Threat Model):
    The key is split between the device and the server: scrypt hardens
    the user passphrase locally, and a server-held pepper is mixed in via
    HKDF. The stored cipher blob alone is not enough to decrypt the
    mnemonic. Decrypted mnemonics live in process memory only for the
    duration of a call; a memory dump taken during that window could
    expose them. This is an accepted limitation.
"""

from .config import VaultConfig, ScryptParams, DEFAULT_SCRYPT
from .crypto import (
    VaultKey,
    EncryptedPayload,
    derive_hardened_key,
    derive_encryption_key,
    encrypt,
    decrypt,
)
from .blob import CipherBlob
from .exceptions import (
    VaultError,
    InvalidParameter,
    InvalidKeyMaterial,
    DerivationFailed,
    AuthenticationFailed,
    NotFound,
    Conflict,
    StoreError,
    NoVault,
    PepperUnavailable,
)
from .pepper import (
    PepperProvider,
    RemotePepperProvider,
    StaticPepperProvider,
    SessionContext,
    DEVELOPMENT_PEPPER,
)
from .store import VaultStore, InMemoryVaultStore
from .temp_passphrase import TempPassphrase, SecureStorage, InMemorySecureStorage
from .manager import VaultManager, VaultUnlockResult

__all__ = [
    "VaultConfig",
    "ScryptParams",
    "DEFAULT_SCRYPT",
    "VaultKey",
    "EncryptedPayload",
    "derive_hardened_key",
    "derive_encryption_key",
    "encrypt",
    "decrypt",
    "CipherBlob",
    "VaultError",
    "InvalidParameter",
    "InvalidKeyMaterial",
    "DerivationFailed",
    "AuthenticationFailed",
    "NotFound",
    "Conflict",
    "StoreError",
    "NoVault",
    "PepperUnavailable",
    "PepperProvider",
    "RemotePepperProvider",
    "StaticPepperProvider",
    "SessionContext",
    "DEVELOPMENT_PEPPER",
    "VaultStore",
    "InMemoryVaultStore",
    "TempPassphrase",
    "SecureStorage",
    "InMemorySecureStorage",
    "VaultManager",
    "VaultUnlockResult",
]
