"""
KK's Cafe Backend - Drink Service (Business Logic Orchestrator)
================================================================

What:  Create, update, delete and read drinks; garbage-collect image files.
Why:   Keeps the record lifecycle independent of HTTP concerns.
How:   Every mutation is a full read-modify-write of the store, run under a
       single asyncio.Lock so concurrent requests in this process cannot
       clobber each other.

Mutation Flow:
    ┌──────────┐   ┌──────────┐   ┌──────────────┐   ┌──────────┐   ┌──────────────┐
    │ Validate │──▶│  Load    │──▶│ Resolve      │──▶│  Save    │──▶│ Reap orphan  │
    │ fields   │   │  (store) │   │ images       │   │  (store) │   │ image files  │
    └──────────┘   └──────────┘   └──────────────┘   └──────────┘   └──────────────┘
                   └────────────────── under _write_lock ────────────────────────┘

    On failure before the save completes:
    - Files uploaded for this request are removed
    - The stored menu is unchanged
    - The exception propagates to the global error handler

Orphan policy (update and delete alike):
    A local image dropped from a drink is deleted from disk unless another
    remaining drink still references it. External URLs are never touched.
"""

import asyncio
import hashlib
import json
import logging
import time
from typing import Iterable, List, Optional, Sequence, Tuple

from kkcafe.exceptions import ConflictError, NotFoundError, ValidationError
from kkcafe.schemas.drink import Drink
from kkcafe.services.file_service import FileService
from kkcafe.services.image_resolver import resolve_create_images, resolve_update_images
from kkcafe.stores.base import DrinkStore

logger = logging.getLogger(__name__)


def drink_etag(drink: Drink) -> str:
    """Strong ETag over the record's canonical JSON."""
    canonical = json.dumps(drink.model_dump(), sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return '"' + hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:32] + '"'


def _require_text(name: Optional[str], description: Optional[str]) -> Tuple[str, str]:
    name = (name or "").strip()
    description = (description or "").strip()
    if not name or not description:
        raise ValidationError(
            message="Name and description are required",
            field="name" if not name else "description",
        )
    return name, description


class DrinkService:
    """
    Business logic layer for drink operations.

    Responsibilities:
        - list_drinks() / get_drink(): reads
        - create_drink(): new record with resolved images
        - update_drink(): overwrite text, re-resolve images, reap orphans
        - delete_drink(): remove record, reap its images
    """

    def __init__(self, store: DrinkStore, file_service: FileService):
        self.store = store
        self.file_service = file_service
        self._write_lock = asyncio.Lock()

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_drinks(self) -> List[Drink]:
        return await self.store.load()

    async def get_drink(self, drink_id: int) -> Drink:
        drinks = await self.store.load()
        return drinks[self._index_of(drinks, drink_id)]

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create_drink(
        self,
        name: Optional[str],
        description: Optional[str],
        uploaded_images: Sequence[str] = (),
        url_images: Optional[str] = None,
    ) -> Drink:
        """
        Create a drink.

        Args:
            uploaded_images: References of files already stored for this request.
            url_images: Raw urlImages value (JSON array or a single URL).

        Raises:
            ValidationError: name/description blank after trimming.
            StorageError: the store could not be read or written.
        """
        try:
            name, description = _require_text(name, description)
            resolution = resolve_create_images(uploaded_images, url_images)

            async with self._write_lock:
                drinks = await self.store.load()
                drink = Drink(
                    id=self._next_id(drinks),
                    name=name,
                    description=description,
                    images=resolution.images,
                )
                drinks.append(drink)
                await self.store.save(drinks)
        except Exception:
            await self.file_service.discard(uploaded_images)
            raise

        logger.info("Drink created: id=%d name=%r images=%d", drink.id, drink.name, len(drink.images))
        return drink

    async def update_drink(
        self,
        drink_id: int,
        name: Optional[str],
        description: Optional[str],
        uploaded_images: Sequence[str] = (),
        url_images: Optional[str] = None,
        kept_existing_images: Optional[str] = None,
        if_match: Optional[str] = None,
    ) -> Drink:
        """
        Update a drink in place.

        Name and description are always overwritten. Images are re-resolved
        from kept + uploaded + URL images, falling back to the previous list
        when the request made no statement about images at all.

        Raises:
            ValidationError: name/description blank after trimming.
            NotFoundError: no drink with drink_id.
            ConflictError: if_match does not match the stored record.
            StorageError: the store could not be read or written.
        """
        async with self._write_lock:
            try:
                name, description = _require_text(name, description)

                drinks = await self.store.load()
                index = self._index_of(drinks, drink_id)
                current = drinks[index]
                self._check_precondition(current, if_match)

                resolution = resolve_update_images(
                    uploaded_images,
                    url_images,
                    kept_existing_images,
                    current.images,
                )
                updated = Drink(
                    id=current.id,
                    name=name,
                    description=description,
                    images=resolution.images,
                )
                drinks[index] = updated
                await self.store.save(drinks)
            except Exception:
                await self.file_service.discard(uploaded_images)
                raise

            # Must stay under the lock, after the save
            removed = await self._reap_orphans(current.images, drinks)

        logger.info(
            "Drink updated: id=%d images=%d reaped=%d",
            updated.id,
            len(updated.images),
            len(removed),
        )
        return updated

    async def delete_drink(self, drink_id: int, if_match: Optional[str] = None) -> Drink:
        """
        Delete a drink and every local image file only it referenced.

        Returns:
            The deleted record.

        Raises:
            NotFoundError: no drink with drink_id (store unchanged).
            ConflictError: if_match does not match the stored record.
            StorageError: the store could not be read or written.
        """
        async with self._write_lock:
            drinks = await self.store.load()
            index = self._index_of(drinks, drink_id)
            drink = drinks[index]
            self._check_precondition(drink, if_match)

            remaining = drinks[:index] + drinks[index + 1:]
            await self.store.save(remaining)
            removed = await self._reap_orphans(drink.images, remaining)

        logger.info("Drink deleted: id=%d reaped=%d", drink.id, len(removed))
        return drink

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _index_of(drinks: Sequence[Drink], drink_id: int) -> int:
        for index, drink in enumerate(drinks):
            if drink.id == drink_id:
                return index
        raise NotFoundError(resource="drink", resource_id=drink_id)

    @staticmethod
    def _next_id(drinks: Sequence[Drink]) -> int:
        """Creation time in ms, bumped past the largest id already in use."""
        candidate = int(time.time() * 1000)
        if drinks:
            candidate = max(candidate, max(d.id for d in drinks) + 1)
        return candidate

    @staticmethod
    def _check_precondition(drink: Drink, if_match: Optional[str]) -> None:
        if not if_match:
            return
        expected = {tag.strip() for tag in if_match.split(",")}
        if "*" in expected or drink_etag(drink) in expected:
            return
        raise ConflictError(context={"drink_id": drink.id, "if_match": if_match})

    async def _reap_orphans(
        self,
        candidates: Iterable[str],
        remaining: Sequence[Drink],
    ) -> List[str]:
        """Delete local files among `candidates` that no remaining drink references."""
        still_referenced = {ref for drink in remaining for ref in drink.images}
        removed = []
        for reference in dict.fromkeys(candidates):
            if reference in still_referenced or not self.file_service.is_local_reference(reference):
                continue
            if await self.file_service.delete_image(reference):
                removed.append(reference)
        return removed
