"""
KK's Cafe Backend - JSON File Drink Store
==========================================

What:  Persists the whole menu as one pretty-printed JSON array.
Why:   The menu is small and edited rarely; one human-readable file is easy
       to back up, diff and hand-edit.
How:   load() reads and validates the full document. save() writes the full
       document to a sibling temp file and atomically replaces the target,
       so a reader sees either the old menu or the new one.

File format (2-space indent, UTF-8):
    [
      {
        "id": 1718000000000,
        "name": "Latte",
        "description": "Hot milk coffee",
        "images": ["/uploads/drink-1718000000000-42.png"],
        "image": "/uploads/drink-1718000000000-42.png"
      }
    ]

Failure policy:
    - File missing:            empty menu (first run)
    - Unreadable / not UTF-8 /
      bad JSON:                StorageError (never silently treated as empty,
                               the next write would wipe the real menu)
    - Write / replace failed:  StorageError, temp file removed
"""

import json
import logging
import uuid
from pathlib import Path
from typing import List, Sequence

import aiofiles
import aiofiles.os
import pydantic
from pydantic import TypeAdapter

from kkcafe.exceptions import StorageError
from kkcafe.schemas.drink import Drink
from kkcafe.stores.base import DrinkStore

logger = logging.getLogger(__name__)

_drink_list = TypeAdapter(List[Drink])


class JsonFileDrinkStore(DrinkStore):
    """DrinkStore backed by a single JSON document on disk."""

    def __init__(self, data_file: str):
        self.path = Path(data_file).resolve()
        logger.info("JsonFileDrinkStore initialized with data_file=%s", self.path)

    async def load(self) -> List[Drink]:
        if not await aiofiles.os.path.exists(self.path):
            return []

        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except OSError as e:
            logger.error("Failed to read drink store %s: %s", self.path, str(e))
            raise StorageError(context={"path": str(self.path), "os_error": str(e)})
        except UnicodeDecodeError as e:
            logger.error("Drink store %s is not valid UTF-8: %s", self.path, str(e))
            raise StorageError(context={"path": str(self.path), "decode_error": str(e)})

        try:
            return _drink_list.validate_python(json.loads(raw))
        except json.JSONDecodeError as e:
            logger.error("Drink store %s is not valid JSON: %s", self.path, str(e))
            raise StorageError(context={"path": str(self.path), "parse_error": str(e)})
        except pydantic.ValidationError as e:
            logger.error(
                "Drink store %s has malformed records: %d error(s)",
                self.path,
                e.error_count(),
            )
            raise StorageError(context={"path": str(self.path), "schema_errors": e.error_count()})

    async def save(self, drinks: Sequence[Drink]) -> None:
        payload = json.dumps(
            [drink.model_dump() for drink in drinks],
            indent=2,
            ensure_ascii=False,
        )
        # Same directory as the target so the final replace never crosses filesystems
        tmp_path = self.path.with_name(f".{self.path.name}.{uuid.uuid4().hex}.tmp")

        try:
            await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
                await f.flush()
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Failed to write drink store %s: %s", self.path, str(e))
            await self._discard_temp(tmp_path)
            raise StorageError(context={"path": str(self.path), "os_error": str(e)})

        logger.debug("Drink store written: %d record(s)", len(drinks))

    async def _discard_temp(self, tmp_path: Path) -> None:
        try:
            if await aiofiles.os.path.exists(tmp_path):
                await aiofiles.os.remove(tmp_path)
        except OSError as e:
            logger.warning("Failed to remove temp file %s: %s", tmp_path, str(e))
