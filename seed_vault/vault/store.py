"""
Vault Record Store — data access for the ``vaults`` table.

One row per (user_id, name)::

    CREATE TABLE vaults (
        id          BIGSERIAL PRIMARY KEY,
        user_id     TEXT NOT NULL,
        name        TEXT NOT NULL,
        cipher_blob JSONB NOT NULL,
        created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        UNIQUE (user_id, name)
    );

The adapter holds no business logic. It maps "no row" to :class:`NotFound`,
a lost insert race to :class:`Conflict` and every driver failure to
:class:`StoreError`.
"""
import logging
from typing import Any

import asyncpg

from .blob import CipherBlob
from .exceptions import Conflict, NotFound, StoreError

logger = logging.getLogger("seed_vault.vault")

# SQL statements
_SELECT_BLOB = """
SELECT cipher_blob
FROM vaults
WHERE user_id = $1 AND name = $2
"""

_INSERT_BLOB = """
INSERT INTO vaults (user_id, name, cipher_blob, created_at, updated_at)
VALUES ($1, $2, $3::jsonb, NOW(), NOW())
ON CONFLICT (user_id, name) DO NOTHING
RETURNING id
"""

_UPDATE_BLOB = """
UPDATE vaults
SET cipher_blob = $3::jsonb, updated_at = NOW()
WHERE user_id = $1 AND name = $2
"""

_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


class VaultStore:
    """Reads and writes cipher blobs through an asyncpg-compatible pool."""

    def __init__(self, db_pool: Any):
        self._db = db_pool

    async def read_blob(self, user_id: str, name: str) -> CipherBlob:
        """Return the stored blob.

        Raises:
            NotFound: If no row exists (expected on first use).
            StoreError: On any driver failure.
        """
        try:
            async with self._db.acquire() as conn:
                row = await conn.fetchrow(_SELECT_BLOB, user_id, name)
        except _DRIVER_ERRORS as err:
            logger.error("Vault read failed: user=%s name=%s: %s", user_id, name, err)
            raise StoreError(f"Failed to read vault: {err}") from err
        if row is None:
            raise NotFound(f"No vault {name!r} for user {user_id}")
        return CipherBlob.from_record(row["cipher_blob"])

    async def write_blob(self, user_id: str, name: str, blob: CipherBlob) -> None:
        """Insert a new blob; never overwrites.

        Raises:
            Conflict: If a row for (user_id, name) already exists.
            StoreError: On any driver failure.
        """
        try:
            async with self._db.acquire() as conn:
                inserted = await conn.fetchval(
                    _INSERT_BLOB, user_id, name, blob.to_json(),
                )
        except _DRIVER_ERRORS as err:
            logger.error("Vault insert failed: user=%s name=%s: %s", user_id, name, err)
            raise StoreError(f"Failed to create vault: {err}") from err
        if inserted is None:
            raise Conflict(f"Vault {name!r} for user {user_id} already exists")
        logger.debug("Vault inserted: user=%s name=%s", user_id, name)

    async def replace_blob(self, user_id: str, name: str, blob: CipherBlob) -> None:
        """Replace the blob of an existing row in a single statement.

        Raises:
            NotFound: If the row disappeared.
            StoreError: On any driver failure.
        """
        try:
            async with self._db.acquire() as conn:
                status = await conn.execute(
                    _UPDATE_BLOB, user_id, name, blob.to_json(),
                )
        except _DRIVER_ERRORS as err:
            logger.error("Vault update failed: user=%s name=%s: %s", user_id, name, err)
            raise StoreError(f"Failed to update vault: {err}") from err
        # asyncpg returns the command tag, e.g. "UPDATE 1"
        if status.split()[-1] == "0":
            raise NotFound(f"No vault {name!r} for user {user_id}")
        logger.debug("Vault replaced: user=%s name=%s", user_id, name)


class InMemoryVaultStore:
    """Dict-backed store with the same contract as :class:`VaultStore`."""

    def __init__(self):
        self._rows: dict[tuple[str, str], str] = {}

    def __len__(self) -> int:
        return len(self._rows)

    def raw(self, user_id: str, name: str) -> str:
        """Return the stored JSON text of a row."""
        return self._rows[(user_id, name)]

    async def read_blob(self, user_id: str, name: str) -> CipherBlob:
        try:
            return CipherBlob.from_record(self._rows[(user_id, name)])
        except KeyError:
            raise NotFound(f"No vault {name!r} for user {user_id}") from None

    async def write_blob(self, user_id: str, name: str, blob: CipherBlob) -> None:
        if (user_id, name) in self._rows:
            raise Conflict(f"Vault {name!r} for user {user_id} already exists")
        self._rows[(user_id, name)] = blob.to_json()

    async def replace_blob(self, user_id: str, name: str, blob: CipherBlob) -> None:
        if (user_id, name) not in self._rows:
            raise NotFound(f"No vault {name!r} for user {user_id}")
        self._rows[(user_id, name)] = blob.to_json()
