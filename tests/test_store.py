"""
Tests for the vault record store adapters.

Tests cover:
- NotFound on a missing row versus StoreError on driver failures
- Conflict-detecting insert
- In-place replace of an existing row
- Parity between VaultStore and InMemoryVaultStore
"""
import orjson
import pytest

from seed_vault.vault import (
    CipherBlob,
    Conflict,
    InMemoryVaultStore,
    NotFound,
    StoreError,
    VaultStore,
)
from seed_vault.vault.crypto import EncryptedPayload

from .support import FAST_SCRYPT, FakePool


def make_blob(fill: int = 0) -> CipherBlob:
    payload = EncryptedPayload(iv=bytes([fill] * 12), ciphertext=bytes([fill] * 32))
    return CipherBlob.build(FAST_SCRYPT, bytes([fill] * 16), payload)


@pytest.fixture
def pool():
    return FakePool()


@pytest.fixture(params=["postgres", "memory"])
def any_store(request, pool):
    if request.param == "postgres":
        return VaultStore(pool)
    return InMemoryVaultStore()


# --- Test Shared Contract ---

class TestStoreContract:
    """Behavior both adapters must share."""

    @pytest.mark.asyncio
    async def test_read_missing_is_not_found(self, any_store):
        """Test that a missing row is reported as NotFound."""
        with pytest.raises(NotFound):
            await any_store.read_blob("user-1", "default")

    @pytest.mark.asyncio
    async def test_write_then_read(self, any_store):
        """Test that an inserted blob reads back intact."""
        blob = make_blob(1)
        await any_store.write_blob("user-1", "default", blob)
        assert await any_store.read_blob("user-1", "default") == blob

    @pytest.mark.asyncio
    async def test_second_insert_conflicts(self, any_store):
        """Test that inserting over an existing row raises Conflict."""
        await any_store.write_blob("user-1", "default", make_blob(1))
        with pytest.raises(Conflict):
            await any_store.write_blob("user-1", "default", make_blob(2))
        assert await any_store.read_blob("user-1", "default") == make_blob(1)

    @pytest.mark.asyncio
    async def test_replace_existing(self, any_store):
        """Test that replace swaps the whole blob."""
        await any_store.write_blob("user-1", "default", make_blob(1))
        await any_store.replace_blob("user-1", "default", make_blob(2))
        assert await any_store.read_blob("user-1", "default") == make_blob(2)

    @pytest.mark.asyncio
    async def test_replace_missing_is_not_found(self, any_store):
        """Test that replace never creates a row."""
        with pytest.raises(NotFound):
            await any_store.replace_blob("user-1", "default", make_blob(1))

    @pytest.mark.asyncio
    async def test_rows_are_per_user_and_name(self, any_store):
        """Test that users and vault names are isolated."""
        await any_store.write_blob("user-1", "default", make_blob(1))
        await any_store.write_blob("user-2", "default", make_blob(2))
        await any_store.write_blob("user-1", "savings", make_blob(3))
        assert await any_store.read_blob("user-2", "default") == make_blob(2)
        assert await any_store.read_blob("user-1", "savings") == make_blob(3)


# --- Test asyncpg Adapter ---

class TestVaultStore:
    """Tests specific to the asyncpg-backed adapter."""

    @pytest.mark.asyncio
    async def test_persists_json_record(self, pool):
        """Test that the row holds the JSON wire format."""
        store = VaultStore(pool)
        await store.write_blob("user-1", "default", make_blob(1))
        stored = orjson.loads(pool.rows[("user-1", "default")])
        assert stored["v"] == 1
        assert set(stored) == {"v", "params", "saltPB64", "ivB64", "ctB64"}

    @pytest.mark.asyncio
    async def test_insert_uses_conflict_clause(self, pool):
        """Test that the insert path never overwrites an existing row."""
        store = VaultStore(pool)
        await store.write_blob("user-1", "default", make_blob(1))
        assert "ON CONFLICT" in pool.conn.statements[-1]
        assert "DO NOTHING" in pool.conn.statements[-1]

    @pytest.mark.asyncio
    async def test_read_accepts_decoded_jsonb(self, pool):
        """Test rows whose codec already decoded jsonb to a mapping."""
        pool.rows[("user-1", "default")] = make_blob(4).to_record()
        store = VaultStore(pool)
        assert await store.read_blob("user-1", "default") == make_blob(4)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["read_blob", "write_blob", "replace_blob"])
    async def test_driver_errors_become_store_error(self, method):
        """Test that connectivity failures surface as StoreError."""
        store = VaultStore(FakePool(error=ConnectionRefusedError("db down")))
        args = ("user-1", "default")
        if method != "read_blob":
            args += (make_blob(1),)
        with pytest.raises(StoreError) as exc:
            await getattr(store, method)(*args)
        assert isinstance(exc.value.__cause__, ConnectionRefusedError)

    @pytest.mark.asyncio
    async def test_not_found_is_not_logged_as_error(self, pool, caplog):
        """Test that a missing row is an expected branch, not an error."""
        store = VaultStore(pool)
        with caplog.at_level("ERROR", logger="seed_vault.vault"):
            with pytest.raises(NotFound):
                await store.read_blob("user-1", "default")
        assert caplog.records == []
