"""Supabase Storage for photo bytes and site content documents."""

import json
import logging
from dataclasses import dataclass
from typing import BinaryIO

import httpx
from storage3.utils import StorageException
from supabase import Client

from wedding_portal.domain.content import document_filename
from wedding_portal.errors import BackendUnavailableError
from wedding_portal.services.albums import PhotoLocation, PhotoStorage
from wedding_portal.services.content import ContentStore

logger = logging.getLogger(__name__)

DEFAULT_BUCKET = "site-data"


def _is_not_found(exc: Exception) -> bool:
    return "not found" in str(exc).lower()


@dataclass
class SupabasePhotoStorage(PhotoStorage):
    """Stores photos as ``albums/<album_id>/<filename>`` objects in a bucket."""

    client: Client
    bucket: str = DEFAULT_BUCKET

    def ensure_writable(self) -> None:
        """Bucket uploads are always possible once the client is configured."""

    def save(
        self,
        album_id: int,
        filename: str,
        content: BinaryIO,
        content_type: str | None,
    ) -> str:
        """Upload the photo and return the object path."""
        path = _photo_path(album_id, filename)
        body = content.read()
        try:
            self.client.storage.from_(self.bucket).upload(
                path,
                body,
                file_options={
                    "content-type": content_type or "application/octet-stream",
                    "upsert": "true",
                },
            )
        except (StorageException, httpx.HTTPError) as exc:
            logger.exception("Photo upload failed", extra={"path": path})
            raise BackendUnavailableError("Could not store the photo.") from exc
        return path

    def locate(self, album_id: int, filename: str) -> PhotoLocation | None:
        """Return the public URL of the object."""
        url = self.client.storage.from_(self.bucket).get_public_url(
            _photo_path(album_id, filename)
        )
        return PhotoLocation(url=url)


@dataclass
class SupabaseContentStore(ContentStore):
    """Stores content documents as JSON objects in a bucket."""

    client: Client
    bucket: str = DEFAULT_BUCKET

    def read(self, name: str) -> object | None:
        """Download and parse a document; missing objects return None."""
        filename = document_filename(name)
        try:
            raw = self.client.storage.from_(self.bucket).download(filename)
        except (StorageException, httpx.HTTPError) as exc:
            if _is_not_found(exc):
                return None
            logger.exception("Content download failed", extra={"document": name})
            raise BackendUnavailableError() from exc
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Stored content is not JSON", extra={"document": name})
            return None

    def write(self, name: str, data: object) -> None:
        """Upload a document, overwriting any previous version."""
        filename = document_filename(name)
        body = json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")
        try:
            self.client.storage.from_(self.bucket).upload(
                filename,
                body,
                file_options={"content-type": "application/json", "upsert": "true"},
            )
        except (StorageException, httpx.HTTPError) as exc:
            logger.exception("Content upload failed", extra={"document": name})
            raise BackendUnavailableError(
                f'Storage upload failed; check that bucket "{self.bucket}" exists.'
            ) from exc


def _photo_path(album_id: int, filename: str) -> str:
    return f"albums/{album_id}/{filename}"
