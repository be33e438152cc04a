"""
SQL Mapping Store

MappingStore backed by SQLAlchemy's async engine (SQLite by default,
PostgreSQL in production).

Atomic primitives:
- Conditional put: a plain INSERT; the primary key on short_code turns a
  collision into an IntegrityError, which is reported as CodeCollisionError
- Counter increment: UPDATE ... SET click_count = click_count + :delta, so the
  database does the read-modify-write
"""

import logging
from typing import Optional

from pydantic import ValidationError as ModelValidationError
from sqlalchemy import MetaData, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from shortener.core.exceptions import CodeCollisionError, ShortCodeNotFoundError, StorageError
from shortener.db.models import CLICK_COUNT_FIELD, ShortUrlMapping, build_mapping_table
from shortener.db.session import create_engine_for, create_session_maker
from shortener.db.store import CounterUpdate, MappingStore

logger = logging.getLogger(__name__)


class SQLMappingStore(MappingStore):
    """Mapping store on a relational database."""

    def __init__(
        self,
        engine: AsyncEngine,
        table_name: str,
        session_maker: Optional[async_sessionmaker] = None,
    ):
        """
        Args:
            engine: Async engine for the target database
            table_name: Name of the mappings table
            session_maker: Session factory (built from engine when omitted)
        """
        self.engine = engine
        self.metadata = MetaData()
        self.table = build_mapping_table(table_name, self.metadata)
        self.session_maker = session_maker or create_session_maker(engine)

    @classmethod
    def from_url(cls, database_url: str, table_name: str) -> "SQLMappingStore":
        return cls(create_engine_for(database_url), table_name)

    async def initialize(self) -> None:
        """Create the mappings table when it does not exist yet."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(self.metadata.create_all)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to create table '{self.table.name}'", original_error=e)

    async def close(self) -> None:
        await self.engine.dispose()

    async def put(self, mapping: ShortUrlMapping, if_absent: bool = True) -> None:
        values = mapping.model_dump()
        async with self.session_maker() as session:
            try:
                if if_absent:
                    await session.execute(insert(self.table).values(**values))
                else:
                    result = await session.execute(
                        update(self.table)
                        .where(self.table.c.short_code == mapping.short_code)
                        .values(**values)
                    )
                    if result.rowcount == 0:
                        await session.execute(insert(self.table).values(**values))
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                if if_absent:
                    raise CodeCollisionError(mapping.short_code) from e
                raise StorageError(
                    f"Failed to write short code '{mapping.short_code}'", original_error=e
                )
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Failed to write short code {mapping.short_code}: {e}", exc_info=True)
                raise StorageError(
                    f"Failed to write short code '{mapping.short_code}'", original_error=e
                )

    async def get(self, short_code: str) -> ShortUrlMapping:
        statement = select(self.table).where(self.table.c.short_code == short_code)
        try:
            async with self.session_maker() as session:
                result = await session.execute(statement)
                row = result.mappings().first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to read short code {short_code}: {e}", exc_info=True)
            raise StorageError(f"Failed to read short code '{short_code}'", original_error=e)

        if row is None:
            raise ShortCodeNotFoundError(short_code)
        try:
            return ShortUrlMapping.model_validate(dict(row))
        except ModelValidationError as e:
            logger.error(f"Malformed row for short code {short_code}: {e}")
            raise StorageError(f"Malformed record for short code '{short_code}'", original_error=e)

    async def increment_counter(
        self,
        short_code: str,
        field: str = CLICK_COUNT_FIELD,
        delta: int = 1,
    ) -> CounterUpdate:
        if field not in self.table.c:
            return CounterUpdate(short_code, applied=False, error=f"unknown field '{field}'")

        column = self.table.c[field]
        statement = (
            update(self.table)
            .where(self.table.c.short_code == short_code)
            .values({column: column + delta})
        )
        async with self.session_maker() as session:
            try:
                result = await session.execute(statement)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                return CounterUpdate(short_code, applied=False, error=str(e))

        if result.rowcount == 0:
            return CounterUpdate(short_code, applied=False, error="short code not found")
        return CounterUpdate(short_code, applied=True)
