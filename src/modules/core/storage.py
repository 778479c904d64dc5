"""Image storage collaborator.

Wraps Django's storage API behind ``IImageStorage`` so services receive
the storage as a dependency instead of writing to hard-coded upload
paths.  ``delete`` is best-effort: failures are logged and swallowed
because a dangling file must never fail a business operation.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import urlparse

import structlog
import uuid6
from django.conf import settings
from django.core.files.base import File
from django.core.files.storage import Storage, default_storage
from django.utils.text import slugify

logger = structlog.get_logger(__name__)


class IImageStorage(ABC):
    @abstractmethod
    def save(self, upload: File, folder: str, name_hint: str) -> str:
        """Store *upload* and return its public URL."""

    @abstractmethod
    def delete(self, url: str) -> None:
        """Remove the file behind *url*; never raises."""


class DjangoImageStorage(IImageStorage):
    """``IImageStorage`` backed by a Django ``Storage`` (default storage if omitted)."""

    def __init__(self, storage: Optional[Storage] = None) -> None:
        self._storage = storage or default_storage

    def save(self, upload: File, folder: str, name_hint: str) -> str:
        extension = os.path.splitext(upload.name or "")[1].lower() or ".jpg"
        filename = f"{slugify(name_hint) or 'image'}-{uuid6.uuid7().hex[-12:]}{extension}"
        stored_name = self._storage.save(f"{folder}/{filename}", upload)
        logger.info("storage.image_saved", path=stored_name)
        return self._storage.url(stored_name)

    def delete(self, url: str) -> None:
        path = self._path_from_url(url)
        if not path:
            return
        try:
            if self._storage.exists(path):
                self._storage.delete(path)
                logger.info("storage.image_deleted", path=path)
        except Exception as exc:
            logger.error("storage.image_delete_failed", path=path, error=str(exc))

    @staticmethod
    def _path_from_url(url: str) -> str:
        path = urlparse(url).path
        media_url = urlparse(settings.MEDIA_URL or "").path
        if media_url and path.startswith(media_url):
            path = path[len(media_url):]
        return path.lstrip("/")
