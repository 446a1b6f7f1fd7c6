"""
Tenant-scoped conditional query builder.

Builds SELECT and UPDATE statements with asyncpg-style ``$n`` placeholders
from sparse filter / update mappings (usually ``Record.present()``). The
statements are run with ``AsyncConnection.exec_driver_sql``.

Every statement must be filtered by ``tenant_id``. A missing tenant id is a
coding defect, so it raises ``InternalError`` instead of producing an
unfiltered query.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from core.errors import InternalError

TENANT_COLUMN = "tenant_id"

_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")
_OPERATORS = frozenset({"=", "<>", "<", "<=", ">", ">="})


@dataclass
class Statement:
    sql: str
    params: list[Any] = field(default_factory=list)

    def as_driver_args(self) -> tuple[str, tuple[Any, ...]]:
        return self.sql, tuple(self.params)


def _check_identifier(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise InternalError(f"Refusing to build a query with identifier {name!r}")
    return name


def require_tenant(filters: Mapping[str, Any]) -> None:
    if not filters.get(TENANT_COLUMN):
        raise InternalError("TenantId must be provided to tenant-scoped queries")


def build_conditions(
    filters: Mapping[str, Any],
    start: int = 1,
    operators: Optional[Mapping[str, str]] = None,
) -> tuple[str, list[Any]]:
    """
    Render ``WHERE a = $start AND b = $start+1 ...`` in the filters' order.

    A ``None`` value renders ``col IS NULL`` and takes no placeholder.
    """
    operators = operators or {}
    clauses: list[str] = []
    params: list[Any] = []
    position = start
    for column, value in filters.items():
        _check_identifier(column)
        if value is None:
            clauses.append(f"{column} IS NULL")
            continue
        operator = operators.get(column, "=")
        if operator not in _OPERATORS:
            raise InternalError(f"Unsupported comparison operator {operator!r}")
        clauses.append(f"{column} {operator} ${position}")
        params.append(value)
        position += 1

    sql = " ".join(
        f"{'WHERE' if index == 0 else 'AND'} {clause}" for index, clause in enumerate(clauses)
    )
    return sql, params


def build_select(
    table: str,
    filters: Mapping[str, Any],
    columns: Optional[Sequence[str]] = None,
    operators: Optional[Mapping[str, str]] = None,
) -> Statement:
    require_tenant(filters)
    _check_identifier(table)
    selected = ", ".join(_check_identifier(column) for column in columns) if columns else "*"
    where, params = build_conditions(filters, start=1, operators=operators)
    return Statement(f"SELECT {selected} FROM {table} {where}", params)


def build_update(
    table: str,
    updates: Mapping[str, Any],
    filters: Mapping[str, Any],
    operators: Optional[Mapping[str, str]] = None,
) -> Statement:
    """
    SET columns take placeholders 1..N and the WHERE clause continues from
    N+1, so the parameters are the new values followed by the filter values.
    """
    require_tenant(filters)
    _check_identifier(table)
    if not updates:
        raise InternalError(f"No columns provided to update on {table}")

    assignments = ", ".join(
        f"{_check_identifier(column)} = ${position}"
        for position, column in enumerate(updates, start=1)
    )
    where, where_params = build_conditions(filters, start=len(updates) + 1, operators=operators)
    return Statement(
        f"UPDATE {table} SET {assignments} {where}",
        [*updates.values(), *where_params],
    )
