"""
KK's Cafe Backend - SQL Drink Store
====================================

What:  DrinkStore on an embedded database through async SQLAlchemy.
Why:   Same whole-list contract as the JSON file, but every save is a real
       transaction, so a crash mid-write leaves the previous menu intact.
How:   save() deletes every row and inserts the new set inside one
       transaction. load() reads rows ordered by `position`.
       The table is created on first use.

Default URL: sqlite+aiosqlite:///./drinks.db
"""

import asyncio
import logging
from typing import List, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from kkcafe.database import Base, build_engine, build_session_factory
from kkcafe.exceptions import StorageError
from kkcafe.models.drink import DrinkRow
from kkcafe.schemas.drink import Drink
from kkcafe.stores.base import DrinkStore

logger = logging.getLogger(__name__)


class SqlDrinkStore(DrinkStore):
    """DrinkStore backed by the `drinks` table."""

    def __init__(self, database_url: str, echo: bool = False):
        self.engine = build_engine(database_url, echo=echo)
        self.session_factory = build_session_factory(self.engine)
        self._schema_ready = False
        self._schema_lock = asyncio.Lock()
        logger.info("SqlDrinkStore initialized with database=%s", self.engine.url.render_as_string())

    async def _ensure_schema(self) -> None:
        if self._schema_ready:
            return
        async with self._schema_lock:
            if self._schema_ready:
                return
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            self._schema_ready = True

    async def load(self) -> List[Drink]:
        try:
            await self._ensure_schema()
            async with self.session_factory() as session:
                result = await session.execute(select(DrinkRow).order_by(DrinkRow.position))
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Failed to read drinks table: %s", str(e))
            raise StorageError(context={"error_type": type(e).__name__})

        return [
            Drink(id=row.id, name=row.name, description=row.description, images=list(row.images or []))
            for row in rows
        ]

    async def save(self, drinks: Sequence[Drink]) -> None:
        try:
            await self._ensure_schema()
            async with self.session_factory() as session:
                async with session.begin():
                    await session.execute(delete(DrinkRow))
                    session.add_all(
                        DrinkRow(
                            id=drink.id,
                            position=index,
                            name=drink.name,
                            description=drink.description,
                            images=list(drink.images),
                        )
                        for index, drink in enumerate(drinks)
                    )
        except SQLAlchemyError as e:
            logger.error("Failed to write drinks table: %s", str(e))
            raise StorageError(context={"error_type": type(e).__name__})

    async def close(self) -> None:
        await self.engine.dispose()
