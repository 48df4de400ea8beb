"""Shared fixtures: an in-memory Supabase double, an RSA signing key and an app client.

No live Supabase project or bot gateway is required.
"""

from __future__ import annotations

import os
from types import SimpleNamespace
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from postgrest.exceptions import APIError

# ---------------------------------------------------------------------------
# Env bootstrap (must run before any application imports)
# ---------------------------------------------------------------------------

_RSA_KEY = rsa.generate_private_key(public_exponent=65537, key_size=2048)
PRIVATE_KEY_PEM = _RSA_KEY.private_bytes(
    serialization.Encoding.PEM,
    serialization.PrivateFormat.PKCS8,
    serialization.NoEncryption(),
).decode()
PUBLIC_KEY_PEM = _RSA_KEY.public_key().public_bytes(
    serialization.Encoding.PEM,
    serialization.PublicFormat.SubjectPublicKeyInfo,
).decode()

BOT_BASE_URL = "https://bot.test"
NICKNAME_URL = "https://nickname.bot.test/guild/member"

os.environ["DISCORD_BOT_BASE_URL"] = BOT_BASE_URL
os.environ["DISCORD_BOT_NICKNAME_URL"] = NICKNAME_URL
os.environ["DISCORD_BOT_PRIVATE_KEY"] = PRIVATE_KEY_PEM
os.environ["DISCORD_BOT_TOKEN_TTL"] = "60"
os.environ["RATE_LIMIT"] = "10000/minute"
os.environ.setdefault("SUPABASE_URL", "https://supabase.test")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

from community_backend.config.settings import BotGatewayConfig  # noqa: E402
from community_backend.database.document_store import DocumentStore  # noqa: E402
from community_backend.modules.auth.service import clear_auth_cache  # noqa: E402


# ---------------------------------------------------------------------------
# In-memory Supabase double
# ---------------------------------------------------------------------------


def _sort_key(value: Any) -> tuple:
    return (value is None, value if value is not None else "")


class FakeQuery:
    """Mimics the chained PostgREST request builder for the calls the app makes."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload: Any = None
        self.predicates: list[Callable[[dict], bool]] = []
        self.orders: list[tuple[str, bool]] = []
        self._limit: int | None = None
        self._offset = 0

    def select(self, *columns: str) -> "FakeQuery":
        self.op = "select"
        return self

    def insert(self, data: Any) -> "FakeQuery":
        self.op = "insert"
        self.payload = data
        return self

    def update(self, data: dict) -> "FakeQuery":
        self.op = "update"
        self.payload = data
        return self

    def delete(self) -> "FakeQuery":
        self.op = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.predicates.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column: str, values: list) -> "FakeQuery":
        allowed = list(values)
        self.predicates.append(lambda row: row.get(column) in allowed)
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.orders.append((column, desc))
        return self

    def limit(self, size: int) -> "FakeQuery":
        self._limit = size
        return self

    def offset(self, size: int) -> "FakeQuery":
        self._offset = size
        return self

    def _matching(self) -> list[dict]:
        return [row for row in self.db.tables.setdefault(self.table, []) if all(p(row) for p in self.predicates)]

    def execute(self) -> SimpleNamespace:
        self.db.calls.append((self.table, self.op))
        failure = self.db.failures.pop((self.table, self.op), None)
        if failure is not None:
            raise failure
        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "select":
            found = [dict(row) for row in self._matching()]
            for column, desc in reversed(self.orders):
                found.sort(key=lambda row: _sort_key(row.get(column)), reverse=desc)
            found = found[self._offset:]
            if self._limit is not None:
                found = found[: self._limit]
            return SimpleNamespace(data=found)

        if self.op == "insert":
            new_rows = self.payload if isinstance(self.payload, list) else [self.payload]
            for row in new_rows:
                self.db.check_unique(self.table, row, rows + [r for r in new_rows if r is not row])
            rows.extend(dict(row) for row in new_rows)
            return SimpleNamespace(data=[dict(row) for row in new_rows])

        if self.op == "update":
            updated = []
            for row in self._matching():
                row.update(self.payload)
                updated.append(dict(row))
            return SimpleNamespace(data=updated)

        if self.op == "delete":
            doomed = self._matching()
            self.db.tables[self.table] = [row for row in rows if row not in doomed]
            return SimpleNamespace(data=[dict(row) for row in doomed])

        raise AssertionError(f"unsupported op {self.op}")


class FakeSupabase:
    def __init__(self, unique: dict[str, list[tuple[str, ...]]] | None = None):
        self.tables: dict[str, list[dict]] = {}
        self.unique = unique or {}
        self.calls: list[tuple[str, str]] = []
        self.failures: dict[tuple[str, str], Exception] = {}
        self.auth = MagicMock()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def check_unique(self, table: str, row: dict, others: list[dict]) -> None:
        for columns in self.unique.get(table, []):
            key = tuple(row.get(c) for c in columns)
            if any(tuple(other.get(c) for c in columns) == key for other in others):
                raise APIError({
                    "code": "23505",
                    "message": f"duplicate key value violates unique constraint on {table}{columns}",
                    "details": "",
                    "hint": "",
                })

    def fail(self, table: str, op: str, code: str = "XX000") -> None:
        self.failures[(table, op)] = APIError({"code": code, "message": "simulated failure", "details": "", "hint": ""})

    def writes(self, table: str | None = None) -> list[tuple[str, str]]:
        return [c for c in self.calls if c[1] != "select" and (table is None or c[0] == table)]

    def seed(self, table: str, *rows: dict) -> None:
        self.tables.setdefault(table, []).extend(dict(r) for r in rows)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_auth_cache():
    clear_auth_cache()
    yield
    clear_auth_cache()


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase(unique={
        "discordRoles": [("rolename",)],
        "memberGroupRoles": [("roleid", "userid")],
    })


@pytest.fixture
def store(fake_supabase: FakeSupabase) -> DocumentStore:
    return DocumentStore(fake_supabase)


@pytest.fixture
def public_key_pem() -> str:
    return PUBLIC_KEY_PEM


@pytest.fixture
def gateway_config() -> BotGatewayConfig:
    return BotGatewayConfig(
        base_url=BOT_BASE_URL,
        nickname_url=NICKNAME_URL,
        private_key=PRIVATE_KEY_PEM,
        token_ttl=60,
    )


def _auth_user(user_id: str, super_user: bool = False) -> SimpleNamespace:
    return SimpleNamespace(
        user=SimpleNamespace(
            id=user_id,
            email=f"{user_id}@example.com",
            app_metadata={"type": "super_user"} if super_user else {},
        )
    )


@pytest.fixture
def member(fake_supabase: FakeSupabase) -> dict:
    """A signed-in, non-admin member linked to Discord."""
    profile = {"id": "user-1", "username": "ankush", "discordId": "discord-1"}
    fake_supabase.seed("users", profile)
    fake_supabase.auth.get_user.return_value = _auth_user("user-1")
    return profile


@pytest.fixture
def super_user(fake_supabase: FakeSupabase) -> dict:
    profile = {"id": "admin-1", "username": "admin", "discordId": "discord-admin"}
    fake_supabase.seed("users", profile)
    fake_supabase.auth.get_user.return_value = _auth_user("admin-1", super_user=True)
    return profile


@pytest.fixture
def client(fake_supabase: FakeSupabase):
    from fastapi.testclient import TestClient

    from community_backend.database.supabase_client import get_service_supabase, get_supabase
    from community_backend.main import app

    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    app.dependency_overrides[get_service_supabase] = lambda: fake_supabase
    with TestClient(app, raise_server_exceptions=False) as test_client:
        test_client.headers["Authorization"] = "Bearer test-token"
        yield test_client
    app.dependency_overrides.clear()
