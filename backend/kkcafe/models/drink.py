"""
KK's Cafe Backend - Drink SQLAlchemy Model
===========================================

What:  ORM model for the `drinks` table used by the SQL drink store.
How:   One row per drink. `images` is a JSON column holding the ordered
       reference list; `position` preserves menu order across full rewrites.

The derived `image` field is not stored: it is recomputed by the Drink
schema when rows are turned back into records.
"""

from typing import List

from sqlalchemy import JSON, BigInteger, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from kkcafe.database import Base


class DrinkRow(Base):
    __tablename__ = "drinks"

    # Ids are assigned by DrinkService (epoch milliseconds), never by the DB
    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)

    position: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    name: Mapped[str] = mapped_column(Text, nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False)

    images: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<DrinkRow(id={self.id}, name='{self.name}', images={len(self.images or [])})>"
