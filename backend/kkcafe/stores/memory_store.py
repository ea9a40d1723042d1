"""In-process drink store. Nothing survives a restart."""

from typing import Iterable, List, Optional, Sequence

from kkcafe.schemas.drink import Drink
from kkcafe.stores.base import DrinkStore


class InMemoryDrinkStore(DrinkStore):

    def __init__(self, drinks: Optional[Iterable[Drink]] = None):
        self._drinks: List[Drink] = [d.model_copy(deep=True) for d in drinks or ()]

    async def load(self) -> List[Drink]:
        # Copies, so callers mutating records cannot change the stored state
        return [d.model_copy(deep=True) for d in self._drinks]

    async def save(self, drinks: Sequence[Drink]) -> None:
        self._drinks = [d.model_copy(deep=True) for d in drinks]
