"""Seed Vault.

Passphrase-protected storage of a wallet recovery phrase.
"""
from .version import (
    __title__,
    __description__,
    __version__,
    __author__,
    __license__,
)
from .vault import VaultManager, VaultConfig

__all__ = ("VaultManager", "VaultConfig", "__version__")
