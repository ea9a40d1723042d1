"""
KK's Cafe Backend - Record Store Package
=========================================

What:  DrinkStore implementations and the factory that picks one.
Who:   create_app() builds the configured store once at startup.
"""

from kkcafe.config import Settings
from kkcafe.stores.base import DrinkStore
from kkcafe.stores.json_store import JsonFileDrinkStore
from kkcafe.stores.memory_store import InMemoryDrinkStore


def build_store(settings: Settings) -> DrinkStore:
    """Instantiate the store selected by settings.store_backend."""
    if settings.store_backend == "sql":
        # Imported lazily so the JSON backend never loads the database driver
        from kkcafe.stores.sql_store import SqlDrinkStore

        return SqlDrinkStore(settings.database_url, echo=settings.log_level == "DEBUG")
    return JsonFileDrinkStore(settings.data_file)


__all__ = ["DrinkStore", "InMemoryDrinkStore", "JsonFileDrinkStore", "build_store"]
