"""Test doubles and constants shared by the seed vault tests."""
from contextlib import asynccontextmanager

from seed_vault.vault import ScryptParams

# Small cost parameters keep the suite fast; production defaults are N=16384.
FAST_SCRYPT = ScryptParams(N=1024, r=8, p=1)

PEPPER = bytes(range(32))
OTHER_PEPPER = bytes(range(1, 33))

MNEMONIC = (
    "twelve word phrase abandon ability able about above absent absorb "
    "abstract absurd abuse"
)


class FakeConnection:
    """Minimal asyncpg connection double over a dict of rows."""

    def __init__(self, rows: dict, error: Exception = None):
        self.rows = rows
        self.error = error
        self.statements: list[str] = []

    def _check(self, sql: str) -> None:
        self.statements.append(sql)
        if self.error is not None:
            raise self.error

    async def fetchrow(self, sql, user_id, name):
        self._check(sql)
        data = self.rows.get((user_id, name))
        return None if data is None else {"cipher_blob": data}

    async def fetchval(self, sql, user_id, name, data):
        self._check(sql)
        if (user_id, name) in self.rows:
            return None
        self.rows[(user_id, name)] = data
        return len(self.rows)

    async def execute(self, sql, user_id, name, data):
        self._check(sql)
        if (user_id, name) not in self.rows:
            return "UPDATE 0"
        self.rows[(user_id, name)] = data
        return "UPDATE 1"


class FakePool:
    """asyncpg-compatible pool yielding one shared FakeConnection."""

    def __init__(self, error: Exception = None):
        self.rows: dict = {}
        self.conn = FakeConnection(self.rows, error)

    @asynccontextmanager
    async def acquire(self):
        yield self.conn
