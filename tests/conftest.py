"""Shared fixtures for seed vault tests."""
import pytest

from seed_vault.vault import (
    InMemoryVaultStore,
    StaticPepperProvider,
    VaultConfig,
    VaultManager,
)

from .support import FAST_SCRYPT, PEPPER


@pytest.fixture
def config():
    return VaultConfig(environment="test", scrypt=FAST_SCRYPT)


@pytest.fixture
def store():
    return InMemoryVaultStore()


@pytest.fixture
def pepper_provider():
    return StaticPepperProvider(PEPPER)


@pytest.fixture
def manager(store, pepper_provider, config):
    return VaultManager(store, pepper_provider, config=config)
