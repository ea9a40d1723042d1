"""
KK's Cafe Backend - Abstract Drink Store Interface
===================================================

What:  Abstract base class defining the contract for persisting the menu.
Why:   DrinkService only ever reads the full list and writes the full list
       back. Keeping that behind an interface lets the flat JSON file be
       swapped for an embedded database without touching the service.
How:   Concrete stores inherit from DrinkStore and implement load()/save().

Implementations:
    - JsonFileDrinkStore: single pretty-printed JSON document (default)
    - SqlDrinkStore:      async SQLAlchemy on embedded SQLite
    - InMemoryDrinkStore: process-local list (tests, throwaway runs)
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from kkcafe.exceptions import StorageError
from kkcafe.schemas.drink import Drink


class DrinkStore(ABC):
    """
    Whole-document persistence for drink records.

    Contract:
        - load() returns every record in menu order. A store that has never
          been written returns []. A store that exists but cannot be read
          or parsed raises StorageError; it is never reported as empty.
        - save() replaces the full record set. Readers never observe a
          partially written set. Failures raise StorageError.
    """

    @abstractmethod
    async def load(self) -> List[Drink]:
        """
        Read every drink record.

        Returns:
            A fresh list the caller may mutate freely.

        Raises:
            StorageError: The backing store exists but is unreadable or corrupt.
        """
        ...

    @abstractmethod
    async def save(self, drinks: Sequence[Drink]) -> None:
        """
        Replace the stored record set with `drinks`.

        Raises:
            StorageError: The write did not complete.
        """
        ...

    async def health_check(self) -> bool:
        """True if the store can currently be read."""
        try:
            await self.load()
        except StorageError:
            return False
        return True

    async def close(self) -> None:
        """Release resources held by the store (connections, handles)."""
        return None
