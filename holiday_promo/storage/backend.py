"""Object storage for product photos and generated images."""

from __future__ import annotations

import asyncio
import logging
import mimetypes
import time
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

from holiday_promo.config.settings import Settings
from holiday_promo.errors import UploadSlotNotFound

logger = logging.getLogger(__name__)


class StorageBackend(ABC):
    """Blob store that hands out upload destinations and display URLs."""

    @abstractmethod
    async def issue_upload_url(self) -> str:
        """Return a fresh single-use URL that accepts a raw POST of image bytes."""

    @abstractmethod
    async def accept_upload(self, token: str, data: bytes, content_type: str | None) -> str:
        """Store bytes posted to an issued destination and return the storage id."""

    @abstractmethod
    async def discard_upload(self, upload_url: str) -> None:
        """Drop an issued destination that will not be used."""

    @abstractmethod
    async def save(self, data: bytes, content_type: str | None) -> str:
        """Store bytes directly and return the storage id."""

    @abstractmethod
    async def resolve_url(self, storage_id: str) -> str | None:
        """Return a display URL or ``None`` when the blob does not exist."""


class LocalStorage(StorageBackend):
    """Filesystem storage served back through the API's ``/storage`` routes.

    Issued upload destinations are empty files under ``slots/``; their mtime is
    the issue time, and slots older than ``slot_ttl`` seconds are treated as
    unknown and swept whenever a new destination is issued.
    """

    def __init__(self, root: Path, public_base_url: str, slot_ttl: float = 3600.0) -> None:
        self._root = Path(root)
        self._blobs = self._root / "blobs"
        self._slots = self._root / "slots"
        self._blobs.mkdir(parents=True, exist_ok=True)
        self._slots.mkdir(parents=True, exist_ok=True)
        self._base_url = public_base_url.rstrip("/")
        self._slot_ttl = slot_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "LocalStorage":
        return cls(Path(settings.media_root), settings.public_base_url, settings.upload_slot_ttl)

    def path_for(self, storage_id: str) -> Path | None:
        """Return the blob path for ``storage_id`` if it exists."""

        name = Path(storage_id).name
        if not name or name != storage_id:
            return None
        path = self._blobs / name
        return path if path.is_file() else None

    async def issue_upload_url(self) -> str:
        await asyncio.to_thread(self._sweep_stale_slots)
        token = uuid.uuid4().hex
        await asyncio.to_thread((self._slots / token).touch)
        return f"{self._base_url}/storage/upload/{token}"

    async def accept_upload(self, token: str, data: bytes, content_type: str | None) -> str:
        slot = self._slots / Path(token).name
        stale = await asyncio.to_thread(self._is_stale, slot, time.time())
        try:
            # Unlinking first makes the slot single-use even under concurrent posts.
            await asyncio.to_thread(slot.unlink)
        except FileNotFoundError as exc:
            raise UploadSlotNotFound() from exc
        if stale:
            raise UploadSlotNotFound()
        return await self.save(data, content_type)

    async def discard_upload(self, upload_url: str) -> None:
        token = Path(upload_url.rstrip("/").rsplit("/", 1)[-1]).name
        if token:
            await asyncio.to_thread((self._slots / token).unlink, missing_ok=True)

    async def save(self, data: bytes, content_type: str | None) -> str:
        extension = ""
        if content_type:
            extension = mimetypes.guess_extension(content_type.split(";")[0].strip()) or ""
        storage_id = f"{uuid.uuid4().hex}{extension}"
        await asyncio.to_thread((self._blobs / storage_id).write_bytes, data)
        logger.debug("Stored blob %s (%d bytes)", storage_id, len(data))
        return storage_id

    async def resolve_url(self, storage_id: str) -> str | None:
        if self.path_for(storage_id) is None:
            return None
        return f"{self._base_url}/storage/files/{storage_id}"

    def _is_stale(self, slot: Path, now: float) -> bool:
        try:
            return now - slot.stat().st_mtime > self._slot_ttl
        except FileNotFoundError:
            return False

    def _sweep_stale_slots(self) -> None:
        now = time.time()
        for slot in self._slots.iterdir():
            if self._is_stale(slot, now):
                slot.unlink(missing_ok=True)
                logger.debug("Swept stale upload slot %s", slot.name)
