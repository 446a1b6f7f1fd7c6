import logging

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import create_async_engine, AsyncConnection
from sqlalchemy.orm import DeclarativeBase

from core.config import settings

logger = logging.getLogger(__name__)

db_engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_size=settings.database_pool_size,
    max_overflow=settings.database_max_overflow,
)


# Base class for declarative models. Every constraint is named explicitly in
# the models so the error translation registry can key on it.
class Base(DeclarativeBase):
    metadata = MetaData()


async def init_db(conn: AsyncConnection | None = None) -> None:
    """Create all tables if they do not exist yet."""
    # Registers every model with Base.metadata
    import database.models  # noqa: F401

    if conn is not None:
        await conn.run_sync(Base.metadata.create_all)
        return
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db():
    """Close database engine and connections."""
    await db_engine.dispose()
