"""Generic read endpoints for the catalogue, booking and sales tables.

Each feature area mounts a router built here over its own table. Rows are
read through the shared pool; credential-like columns never leave the
server.
"""
from __future__ import annotations

from typing import Any, Dict, FrozenSet, Iterable

from fastapi import APIRouter, Depends, Query
from sqlalchemy import column, func, literal_column, select, table
from sqlalchemy.engine import Connection, Row

from api.auth_deps import get_current_admin
from api.deps import get_db
from core.exceptions import NotFoundError

SENSITIVE_COLUMNS: FrozenSet[str] = frozenset(
    {"password", "contrasena", "contraseña", "password_hash", "codigo", "token"}
)


def row_to_dict(row: Row, hidden: Iterable[str] = SENSITIVE_COLUMNS) -> Dict[str, Any]:
    """Convert a result row to a dict without the hidden columns (case-insensitive)."""
    hidden_lower = {h.lower() for h in hidden}
    return {
        key: value
        for key, value in row._mapping.items()
        if str(key).lower() not in hidden_lower
    }


def build_resource_router(
    table_name: str,
    *,
    id_column: str = "id",
    protected: bool = False,
    hidden_columns: FrozenSet[str] = SENSITIVE_COLUMNS,
) -> APIRouter:
    """
    Build a router exposing ``GET ""`` (paginated list) and ``GET "/{id}"``.

    Args:
        table_name: Table read by the router.
        id_column: Primary key column used for lookups and ordering.
        protected: Require an admin bearer token on every route.
        hidden_columns: Columns stripped from every returned row.
    """
    dependencies = [Depends(get_current_admin)] if protected else []
    router = APIRouter(dependencies=dependencies)
    source = table(table_name)
    key = column(id_column)

    @router.get("")
    def list_records(
        limit: int = Query(default=100, ge=1, le=500),
        offset: int = Query(default=0, ge=0),
        db: Connection = Depends(get_db),
    ) -> Dict[str, Any]:
        """List rows ordered by primary key."""
        stmt = (
            select(literal_column("*"))
            .select_from(source)
            .order_by(key)
            .limit(limit)
            .offset(offset)
        )
        rows = db.execute(stmt).all()
        return {
            "success": True,
            "datos": [row_to_dict(r, hidden_columns) for r in rows],
            "limit": limit,
            "offset": offset,
        }

    @router.get("/{item_id:int}")
    def get_record(
        item_id: int,
        db: Connection = Depends(get_db),
    ) -> Dict[str, Any]:
        """Fetch one row by primary key."""
        stmt = select(literal_column("*")).select_from(source).where(key == item_id)
        row = db.execute(stmt).first()
        if row is None:
            raise NotFoundError(f"Registro {item_id} no encontrado en {table_name}")
        return {"success": True, "dato": row_to_dict(row, hidden_columns)}

    return router


def build_report_router(table_name: str, *, protected: bool = True) -> APIRouter:
    """Build a router whose ``GET ""`` returns the row count of a table."""
    dependencies = [Depends(get_current_admin)] if protected else []
    router = APIRouter(dependencies=dependencies)
    source = table(table_name)

    @router.get("")
    def table_report(db: Connection = Depends(get_db)) -> Dict[str, Any]:
        total = db.execute(select(func.count()).select_from(source)).scalar_one()
        return {"success": True, "tabla": table_name, "total": total}

    return router


__all__ = ["SENSITIVE_COLUMNS", "row_to_dict", "build_resource_router", "build_report_router"]
