"""
Pytest Fixtures

Shared fakes and fixtures for testing.
"""

import itertools
from copy import deepcopy
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from app.core.exceptions import StoreError
from app.services.supabase_db import Condition, Operator, Order

# Tables whose primary key is an auto-increment integer
_SERIAL_TABLES = {"releases", "genres", "watchlist_entries"}


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def _matches(row: Dict[str, Any], condition: Condition) -> bool:
    stored = _plain(row.get(condition.column))
    op = condition.op

    # SQL semantics: NULL never compares true
    if stored is None:
        return False

    if op == Operator.IN:
        return stored in [_plain(v) for v in condition.value]

    value = _plain(condition.value)
    if op == Operator.EQ:
        return stored == value
    if op == Operator.NEQ:
        return stored != value
    if op == Operator.GTE:
        return stored >= value
    if op == Operator.LT:
        return stored < value
    raise AssertionError(f"unsupported operator {op}")


class InMemoryDatabase:
    """
    Drop-in replacement for SupabaseDatabase backed by dicts.

    Dates are stored as ISO strings, as PostgREST returns them.
    `fail_on` makes every access to the named tables raise StoreError.
    """

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self._ids = itertools.count(1)
        self._clock = itertools.count(1)
        self.fail_on: set = set()

    def _table(self, name: str) -> List[Dict[str, Any]]:
        if name in self.fail_on:
            raise StoreError(name, "HTTP 503")
        return self.tables.setdefault(name, [])

    def _defaults(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        row = {k: _plain(v) for k, v in row.items()}
        if table in _SERIAL_TABLES and "id" not in row:
            row["id"] = next(self._ids)
        if table == "watchlist_entries":
            row.setdefault("watched", False)
            row.setdefault("rating", None)
        row.setdefault("created_at", next(self._clock))
        return row

    def insert(self, table: str, **row) -> Dict[str, Any]:
        """Seed a row directly; returns the stored copy."""
        stored = self._defaults(table, row)
        self._table(table).append(stored)
        return deepcopy(stored)

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return deepcopy(self.tables.get(table, []))

    async def find_many(
        self,
        table: str,
        where: Optional[List[Condition]] = None,
        order: Optional[List[Order]] = None,
        select: str = "*",
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        rows = [r for r in self._table(table) if all(_matches(r, c) for c in where or [])]
        for o in reversed(order or []):
            rows.sort(
                key=lambda r: (r.get(o.column) is None, r.get(o.column)),
                reverse=o.descending,
            )
        if limit is not None:
            rows = rows[:limit]
        if select != "*":
            columns = [c.strip() for c in select.split(",")]
            rows = [{c: r.get(c) for c in columns} for r in rows]
        return deepcopy(rows)

    async def find_unique(self, table, where, select="*"):
        rows = await self.find_many(table, where=where, select=select, limit=1)
        return rows[0] if rows else None

    async def upsert(self, table: str, row: Dict[str, Any], on_conflict: str) -> Dict[str, Any]:
        keys = [k.strip() for k in on_conflict.split(",")]
        for existing in self._table(table):
            if all(existing.get(k) == _plain(row.get(k)) for k in keys):
                existing.update({k: _plain(v) for k, v in row.items()})
                return deepcopy(existing)
        return self.insert(table, **row)

    async def create_many(self, table: str, rows: List[Dict[str, Any]]) -> None:
        for row in rows:
            self.insert(table, **row)

    async def delete_many(self, table: str, where: List[Condition]) -> None:
        if not where:
            raise ValueError("delete_many requires at least one condition")
        self.tables[table] = [
            r for r in self._table(table) if not all(_matches(r, c) for c in where)
        ]


def _verify_token(token: str, *args, **kwargs) -> dict:
    # "token-<uid>" is valid, anything else is rejected
    if not token.startswith("token-"):
        raise ValueError("invalid token")
    uid = token[len("token-"):]
    return {"uid": uid, "email": f"{uid}@example.com"}


@pytest.fixture(autouse=True)
def fake_firebase():
    """Replace Firebase token verification for every test."""
    with patch("app.core.security.initialize_firebase"), \
         patch("app.core.security.auth.verify_id_token", side_effect=_verify_token):
        yield


@pytest.fixture
def db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def seed_release(db):
    """Factory inserting a release; dates accept str or date."""
    source_ids = itertools.count(1000)

    def _seed(title="Release", release_date="2024-01-15", media_type="movie", **extra):
        return db.insert(
            "releases",
            source_id=extra.pop("source_id", next(source_ids)),
            title=title,
            type=media_type,
            release_date=release_date,
            overview=extra.pop("overview", None),
            poster_path=extra.pop("poster_path", None),
            **extra,
        )

    return _seed


@pytest.fixture
def seed_genre(db):
    source_ids = itertools.count(1)

    def _seed(name: str, source_id: Optional[int] = None):
        return db.insert("genres", source_id=source_id or next(source_ids), name=name)

    return _seed


@pytest.fixture
def link(db):
    def _link(release: dict, *genres: dict):
        for genre in genres:
            db.insert("release_genres", release_id=release["id"], genre_id=genre["id"])

    return _link


@pytest.fixture
def rate(db):
    """Factory inserting a watchlist entry for (user, release)."""
    def _rate(user_id: str, release: dict, rating: Optional[str] = None, watched: bool = False):
        return db.insert(
            "watchlist_entries",
            user_id=user_id,
            release_id=release["id"],
            rating=rating,
            watched=watched,
        )

    return _rate


@pytest.fixture
def client(db):
    """TestClient wired to the in-memory store and a local cache."""
    from app.main import app
    from app.routers import releases
    from app.services.cache_service import CacheService, get_cache_service
    from app.services.supabase_db import get_database

    cache = CacheService(None)
    app.dependency_overrides[get_database] = lambda: db
    app.dependency_overrides[get_cache_service] = lambda: cache
    releases.limiter.enabled = False

    yield TestClient(app)

    app.dependency_overrides.clear()
    releases.limiter.enabled = True


@pytest.fixture
def auth_headers():
    def _headers(uid: str = "alice") -> dict:
        return {"Authorization": f"Bearer token-{uid}"}

    return _headers
