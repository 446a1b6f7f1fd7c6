"""
Persistence functions. Each public function owns its transaction and runs
inside ``translate_errors`` so callers only ever see domain errors.
"""

from datetime import datetime, timezone
from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncConnection

from core.errors import NotFoundError
from database.query_builder import Statement
from database.records import Record

RecordT = TypeVar("RecordT", bound=Record)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def fetch_records(
    conn: AsyncConnection, statement: Statement, record_cls: type[RecordT]
) -> list[RecordT]:
    result = await conn.exec_driver_sql(*statement.as_driver_args())
    return [record_cls(**row) for row in result.mappings().all()]


async def execute_update(conn: AsyncConnection, statement: Statement, entity: str) -> int:
    """Run an UPDATE and raise ``NotFoundError`` when no row matched the filter."""
    result = await conn.exec_driver_sql(*statement.as_driver_args())
    if result.rowcount == 0:
        raise NotFoundError(entity)
    return result.rowcount
