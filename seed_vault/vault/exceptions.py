"""Error taxonomy for the seed vault.

Every error raised by this package derives from :class:`VaultError`.
Messages never carry key material, passphrases or mnemonics.
"""


class VaultError(Exception):
    """Base exception for seed vault operations."""


class InvalidParameter(VaultError, ValueError):
    """Malformed salt, cost parameters or record fields (programming error)."""


class InvalidKeyMaterial(InvalidParameter):
    """Input keying material or pepper is not exactly 32 bytes."""


class DerivationFailed(VaultError):
    """The password-hardening primitive aborted."""


class AuthenticationFailed(VaultError):
    """AEAD tag verification failed.

    Raised for a wrong passphrase, a wrong pepper or tampered data alike;
    callers must not be able to tell these apart.
    """

    def __init__(self, message: str = "Could not unlock vault"):
        super().__init__(message)


class NotFound(VaultError):
    """No cipher blob exists for this user and vault name."""


class Conflict(VaultError):
    """A concurrent creation inserted the record first."""


class StoreError(VaultError):
    """Any other record store failure (connectivity, permission)."""


class NoVault(VaultError):
    """Passphrase rotation requested for a user without a vault."""


class PepperUnavailable(VaultError):
    """The pepper could not be obtained and no fallback is allowed."""
