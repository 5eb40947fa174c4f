"""
Vault Crypto Core — Passphrase hardening, key derivation and AEAD.

Key pipeline for a cipher blob:
- Hardening: scrypt(passphrase, saltP, N, r, p) → 32B key material
- Derivation: HKDF-SHA256(ikm=hardened, salt=pepper, info="hihodl/v1") → AES-256 key
- Encryption: AES-GCM with a random 96-bit IV per call → ciphertext + 16B tag

Security Note:
    Never log plaintext, ciphertext or key material.
    Derived keys only exist inside an opaque :class:`VaultKey` handle.
"""
import os
import asyncio
import logging
from typing import NamedTuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from .config import HKDF_INFO, SALT_SIZE, ScryptParams, is_power_of_two
from .exceptions import (
    AuthenticationFailed,
    DerivationFailed,
    InvalidKeyMaterial,
    InvalidParameter,
)

logger = logging.getLogger("seed_vault.vault")

IV_SIZE = 12  # 96-bit nonce
KEY_LENGTH = 32  # AES-256
PEPPER_SIZE = 32
TAG_SIZE = 16


class EncryptedPayload(NamedTuple):
    """Output of :func:`encrypt`: the IV and ciphertext with the GCM tag appended."""
    iv: bytes
    ciphertext: bytes


class VaultKey:
    """Opaque AES-GCM key handle.

    The raw key bytes are handed to the AEAD primitive on construction and
    never kept on the handle, so a key cannot be read back, printed or
    pickled by callers.
    """

    __slots__ = ("_aead",)

    def __init__(self, key_bytes: bytes):
        self._aead = AESGCM(key_bytes)

    def __repr__(self) -> str:
        return "<VaultKey [redacted]>"

    __str__ = __repr__

    def __reduce__(self):
        raise TypeError("VaultKey cannot be serialized")


# ---------------------------------------------------------------------------
# Password hardening
# ---------------------------------------------------------------------------

def generate_salt() -> bytes:
    """Return a fresh random 16-byte salt."""
    return os.urandom(SALT_SIZE)


def _validate_hardening_input(passphrase: str, salt: bytes, params: ScryptParams) -> None:
    if not isinstance(passphrase, str) or not passphrase:
        raise InvalidParameter("Passphrase must be a non-empty string")
    if not isinstance(salt, (bytes, bytearray)) or len(salt) != SALT_SIZE:
        raise InvalidParameter(f"Salt must be exactly {SALT_SIZE} bytes")
    if not is_power_of_two(params.N):
        raise InvalidParameter("scrypt N must be a power of two >= 1")
    if params.r < 1 or params.p < 1:
        raise InvalidParameter("scrypt r and p must be >= 1")


def harden_passphrase(passphrase: str, salt: bytes, params: ScryptParams) -> bytes:
    """Derive 32 bytes of key material from a passphrase with scrypt.

    This is the blocking variant; use :func:`derive_hardened_key` from
    async code.

    Args:
        passphrase: User passphrase (UTF-8 encoded before hashing).
        salt: 16-byte random salt stored with the blob.
        params: scrypt cost parameters stored with the blob.

    Returns:
        32-byte hardened key material.

    Raises:
        InvalidParameter: On empty passphrase, bad salt length or bad params.
        DerivationFailed: If the scrypt primitive aborts.
    """
    _validate_hardening_input(passphrase, salt, params)
    try:
        kdf = Scrypt(
            salt=bytes(salt),
            length=KEY_LENGTH,
            n=params.N,
            r=params.r,
            p=params.p,
        )
        return kdf.derive(passphrase.encode("utf-8"))
    except (MemoryError, ValueError) as err:
        logger.error(
            "scrypt derivation failed (N=%d, r=%d, p=%d): %s",
            params.N, params.r, params.p, type(err).__name__,
        )
        raise DerivationFailed("Password hardening failed") from err


async def derive_hardened_key(passphrase: str, salt: bytes, params: ScryptParams) -> bytes:
    """Async wrapper around :func:`harden_passphrase`.

    Input is validated on the caller's loop; the memory-hard work runs in
    the default thread pool so the event loop stays responsive.
    """
    _validate_hardening_input(passphrase, salt, params)
    return await asyncio.to_thread(harden_passphrase, passphrase, salt, params)


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_encryption_key(ikm: bytes, pepper: bytes, info: str = HKDF_INFO) -> VaultKey:
    """Derive the AES-256-GCM key from hardened key material and the pepper.

    Args:
        ikm: 32-byte hardened key material (HKDF secret).
        pepper: 32-byte server-held pepper (HKDF salt).
        info: Domain separation string; must match between encrypt and decrypt.

    Returns:
        Opaque :class:`VaultKey`.

    Raises:
        InvalidKeyMaterial: If ikm or pepper is not exactly 32 bytes.
    """
    if not isinstance(ikm, (bytes, bytearray)) or len(ikm) != KEY_LENGTH:
        raise InvalidKeyMaterial(f"Key material must be exactly {KEY_LENGTH} bytes")
    if not isinstance(pepper, (bytes, bytearray)) or len(pepper) != PEPPER_SIZE:
        raise InvalidKeyMaterial(f"Pepper must be exactly {PEPPER_SIZE} bytes")
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=bytes(pepper),
        info=info.encode("utf-8"),
    )
    return VaultKey(hkdf.derive(bytes(ikm)))


# ---------------------------------------------------------------------------
# Authenticated encryption
# ---------------------------------------------------------------------------

def _require_key(key: VaultKey) -> None:
    if not isinstance(key, VaultKey):
        raise InvalidParameter("Expected a VaultKey handle")


def encrypt(key: VaultKey, plaintext: bytes) -> EncryptedPayload:
    """Encrypt plaintext under a fresh random IV.

    Args:
        key: Derived vault key.
        plaintext: Data to encrypt.

    Returns:
        EncryptedPayload(iv, ciphertext) with the tag appended to ciphertext.
    """
    _require_key(key)
    iv = os.urandom(IV_SIZE)
    ct = key._aead.encrypt(iv, bytes(plaintext), None)
    return EncryptedPayload(iv=iv, ciphertext=ct)


def decrypt(key: VaultKey, iv: bytes, ciphertext: bytes) -> bytes:
    """Decrypt and verify a ciphertext.

    Raises:
        AuthenticationFailed: Wrong key, wrong IV, malformed or tampered data.
    """
    _require_key(key)
    if len(iv) != IV_SIZE or len(ciphertext) < TAG_SIZE:
        raise AuthenticationFailed()
    try:
        return key._aead.decrypt(bytes(iv), bytes(ciphertext), None)
    except InvalidTag as err:
        raise AuthenticationFailed() from err
