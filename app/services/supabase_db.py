"""
Supabase Database Service

Thin CRUD layer over the Supabase PostgREST API.

Every query filter is an explicit `Condition` (column, operator, value),
translated here into PostgREST query parameters. Services never build
raw `column=op.value` strings themselves.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple
import httpx
from pydantic import BaseModel, ConfigDict

from ..config import get_settings
from ..core.exceptions import StoreError
from ..core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()


# =============================================================================
# FILTER SPECIFICATION
# =============================================================================

class Operator(str, Enum):
    """Comparison operators understood by PostgREST."""
    EQ = "eq"
    NEQ = "neq"
    GTE = "gte"
    LT = "lt"
    IN = "in"


class Condition(BaseModel):
    """One `column <op> value` predicate."""
    column: str
    op: Operator
    value: Any = None

    model_config = ConfigDict(frozen=True)

    def to_param(self) -> Tuple[str, str]:
        """Render as a PostgREST query parameter pair."""
        if self.op == Operator.IN:
            values = ",".join(_format_value(v, quote=True) for v in self.value)
            return self.column, f"{self.op.value}.({values})"
        return self.column, f"{self.op.value}.{_format_value(self.value)}"


class Order(BaseModel):
    """Sort key for find_many."""
    column: str
    descending: bool = False

    model_config = ConfigDict(frozen=True)

    def to_param(self) -> str:
        return f"{self.column}.{'desc' if self.descending else 'asc'}"


def _format_value(value: Any, quote: bool = False) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        value = value.value
    text = str(value)
    if quote and isinstance(value, str) and any(c in text for c in ',()"'):
        return '"' + text.replace('"', '\\"') + '"'
    return text


def eq(column: str, value: Any) -> Condition:
    return Condition(column=column, op=Operator.EQ, value=value)


def neq(column: str, value: Any) -> Condition:
    return Condition(column=column, op=Operator.NEQ, value=value)


def gte(column: str, value: Any) -> Condition:
    return Condition(column=column, op=Operator.GTE, value=value)


def lt(column: str, value: Any) -> Condition:
    return Condition(column=column, op=Operator.LT, value=value)


def in_(column: str, values: Sequence[Any]) -> Condition:
    return Condition(column=column, op=Operator.IN, value=list(values))


def split_in_conditions(where: Sequence[Condition], chunk_size: int) -> List[List[Condition]]:
    """
    Split a filter whose IN lists exceed `chunk_size` into several filters
    whose union matches the same rows. Long IN lists would otherwise
    overflow the request URL.
    """
    where = list(where)
    for index, condition in enumerate(where):
        if condition.op == Operator.IN and len(condition.value) > chunk_size:
            filters: List[List[Condition]] = []
            for start in range(0, len(condition.value), chunk_size):
                part = in_(condition.column, condition.value[start:start + chunk_size])
                filters.extend(
                    split_in_conditions(where[:index] + [part] + where[index + 1:], chunk_size)
                )
            return filters
    return [where]


def sort_rows(rows: List[Dict[str, Any]], order: Sequence[Order]) -> List[Dict[str, Any]]:
    """Apply `order` to rows in memory; NULLs sort last as in Postgres ascending order."""
    rows = list(rows)
    for key in reversed(order):
        present = [r for r in rows if r.get(key.column) is not None]
        missing = [r for r in rows if r.get(key.column) is None]
        present.sort(key=lambda r: r[key.column], reverse=key.descending)
        rows = missing + present if key.descending else present + missing
    return rows


class ReleaseFilter(BaseModel):
    """
    Filterable attributes of the releases table.

    Date bounds form a half-open window: `date_from` inclusive,
    `date_before` exclusive.
    """
    media_type: Optional[str] = None
    date_from: Optional[date] = None
    date_before: Optional[date] = None
    ids: Optional[List[int]] = None

    def to_conditions(self) -> List[Condition]:
        conditions: List[Condition] = []
        if self.media_type:
            conditions.append(eq("type", self.media_type))
        if self.date_from is not None:
            conditions.append(gte("release_date", self.date_from))
        if self.date_before is not None:
            conditions.append(lt("release_date", self.date_before))
        if self.ids is not None:
            conditions.append(in_("id", self.ids))
        return conditions


# =============================================================================
# CRUD CLIENT
# =============================================================================

# Unique key per table; tables not listed are keyed by "id"
TABLE_KEYS: Dict[str, Tuple[str, ...]] = {
    "release_genres": ("release_id", "genre_id"),
    "user_genre_preferences": ("user_id", "genre_id"),
}

class SupabaseDatabase:
    """
    CRUD access to Supabase tables via PostgREST.

    Operations:
    - find_many / find_unique: filtered, ordered, projected reads
    - upsert: insert-or-update keyed by a unique column set
    - create_many: bulk insert
    - delete_many: filtered delete (a filter is mandatory)

    Any non-2xx response or transport failure raises StoreError.
    No retries are attempted.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        service_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.url = (url if url is not None else settings.supabase_url).rstrip("/")
        self.key = service_key if service_key is not None else settings.supabase_service_key
        self.timeout = timeout or settings.supabase_timeout_seconds
        self.page_size = settings.supabase_page_size
        self.in_chunk_size = settings.supabase_in_chunk_size

        if not self._is_configured():
            logger.error("supabase_not_configured_database")

    def _is_configured(self) -> bool:
        return bool(self.url and self.key)

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.key,
            "Authorization": f"Bearer {self.key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        params: Optional[List[Tuple[str, str]]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> httpx.Response:
        if not self._is_configured():
            raise StoreError(table, "Supabase not configured")

        try:
            async with httpx.AsyncClient() as client:
                response = await client.request(
                    method,
                    f"{self.url}/rest/v1/{table}",
                    params=params,
                    json=json,
                    headers=self._headers(prefer),
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            logger.error("supabase_request_error", table=table, method=method, error=str(e))
            raise StoreError(table, str(e)) from e

        if response.status_code < 200 or response.status_code >= 300:
            logger.error(
                "supabase_request_failed",
                table=table,
                method=method,
                status=response.status_code,
                body=response.text[:200],
            )
            raise StoreError(table, f"HTTP {response.status_code}")

        return response

    async def find_many(
        self,
        table: str,
        where: Optional[List[Condition]] = None,
        order: Optional[List[Order]] = None,
        select: str = "*",
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Return all rows matching every condition.

        PostgREST caps each response at the project's max-rows, so results
        are read page by page until a short page arrives. Long IN lists are
        split into several queries; their results are merged and re-sorted
        by `order`, whose columns must then be part of `select`.
        """
        filters = split_in_conditions(where or [], self.in_chunk_size)
        if len(filters) == 1:
            return await self._find_pages(table, filters[0], order, select, limit)

        rows: List[Dict[str, Any]] = []
        for conditions in filters:
            rows.extend(await self._find_pages(table, conditions, order, select, limit))
        if order:
            rows = sort_rows(rows, order)
        return rows[:limit] if limit is not None else rows

    def _order_param(self, table: str, order: Optional[List[Order]]) -> str:
        # Offset paging needs a total order; the table key breaks ties
        keys = [o.to_param() for o in order or []]
        ordered = {o.column for o in order or []}
        keys.extend(f"{column}.asc" for column in TABLE_KEYS.get(table, ("id",)) if column not in ordered)
        return ",".join(keys)

    async def _find_pages(
        self,
        table: str,
        where: List[Condition],
        order: Optional[List[Order]],
        select: str,
        limit: Optional[int],
    ) -> List[Dict[str, Any]]:
        params: List[Tuple[str, str]] = [("select", select)]
        params.extend(c.to_param() for c in where)
        params.append(("order", self._order_param(table, order)))

        rows: List[Dict[str, Any]] = []
        while True:
            page_size = self.page_size if limit is None else min(self.page_size, limit - len(rows))
            response = await self._request(
                "GET",
                table,
                params=params + [("limit", str(page_size)), ("offset", str(len(rows)))],
            )
            page = response.json()
            rows.extend(page)
            if len(page) < page_size or (limit is not None and len(rows) >= limit):
                return rows

    async def find_unique(
        self,
        table: str,
        where: List[Condition],
        select: str = "*",
    ) -> Optional[Dict[str, Any]]:
        """Return the single row matching `where`, or None."""
        rows = await self.find_many(table, where=where, select=select, limit=1)
        return rows[0] if rows else None

    async def upsert(
        self,
        table: str,
        row: Dict[str, Any],
        on_conflict: str,
    ) -> Dict[str, Any]:
        """
        Insert `row`, or update the columns it carries when a row with the
        same `on_conflict` key exists. Columns absent from `row` keep their
        stored values. Returns the stored row.
        """
        response = await self._request(
            "POST",
            table,
            params=[("on_conflict", on_conflict)],
            json=row,
            prefer="resolution=merge-duplicates,return=representation",
        )
        data = response.json()
        return data[0] if isinstance(data, list) else data

    async def create_many(self, table: str, rows: List[Dict[str, Any]]) -> None:
        """Bulk insert."""
        if not rows:
            return
        await self._request("POST", table, json=rows, prefer="return=minimal")

    async def delete_many(self, table: str, where: List[Condition]) -> None:
        """Delete every row matching `where`, one request per IN-list chunk."""
        if not where:
            raise ValueError("delete_many requires at least one condition")
        for conditions in split_in_conditions(where, self.in_chunk_size):
            await self._request(
                "DELETE",
                table,
                params=[c.to_param() for c in conditions],
                prefer="return=minimal",
            )


# Singleton
_database: Optional[SupabaseDatabase] = None


def get_database() -> SupabaseDatabase:
    """Get singleton SupabaseDatabase instance."""
    global _database
    if _database is None:
        _database = SupabaseDatabase()
    return _database
