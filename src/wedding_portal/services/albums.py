"""Album workflow: photo ingestion, customer selection and approval."""

import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import PurePosixPath
from typing import BinaryIO, Protocol
from uuid import uuid4

from wedding_portal.domain.models import AlbumRecord, PhotoRecord, is_record_id
from wedding_portal.errors import NotFoundError, ValidationError
from wedding_portal.services.repository import PortalRepository

logger = logging.getLogger(__name__)

UPLOADS_URL_ROOT = "/uploads"
MAX_UPLOAD_FILES = 50

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


@dataclass(frozen=True)
class PhotoUpload:
    """Photo file received from an admin upload, read as a stream."""

    filename: str | None
    content: BinaryIO
    content_type: str | None = None


@dataclass(frozen=True)
class PhotoLocation:
    """Where stored photo bytes can be served from."""

    path: str | None = None
    url: str | None = None


class PhotoStorage(Protocol):
    """Storage for album photo bytes."""

    def ensure_writable(self) -> None:
        """Raise NotConfiguredError when uploads cannot be stored."""

    def save(
        self,
        album_id: int,
        filename: str,
        content: BinaryIO,
        content_type: str | None,
    ) -> str:
        """Store the photo stream and return the storage path."""

    def locate(self, album_id: int, filename: str) -> PhotoLocation | None:
        """Return the location of stored bytes, if present."""


def stored_filename(
    original: str | None, now_ms: int | None = None, token: str | None = None
) -> str:
    """Build a unique, path-safe filename for an upload.

    Files sharing a name within one millisecond still differ by the random token.
    """
    base = PurePosixPath((original or "").replace("\\", "/")).name or "photo"
    safe = _UNSAFE_FILENAME_CHARS.sub("_", base)
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    unique = token if token is not None else uuid4().hex[:8]
    return f"{stamp}-{unique}-{safe}"


def photo_url(album_id: int, photo: PhotoRecord) -> str:
    """Return the public URL of a photo."""
    filename = photo.filename or PurePosixPath(photo.storage_path).name
    return f"{UPLOADS_URL_ROOT}/albums/{album_id}/{filename}"


def normalize_selection(raw: object) -> list[int]:
    """Coerce submitted photo ids to unique integers, keeping first-seen order.

    A missing or non-list value clears the selection.
    """
    if not isinstance(raw, list):
        return []
    ids: list[int] = []
    seen: set[int] = set()
    for item in raw:
        value = _coerce_photo_id(item)
        if value not in seen:
            seen.add(value)
            ids.append(value)
    return ids


def _coerce_photo_id(item: object) -> int:
    if isinstance(item, bool):
        raise ValidationError("Photo ids must be numeric.")
    if isinstance(item, int):
        return item
    if isinstance(item, float) and item.is_integer():
        return int(item)
    if isinstance(item, str):
        try:
            return int(item.strip())
        except ValueError:
            pass
    raise ValidationError("Photo ids must be numeric.")


@dataclass
class AlbumService:
    """Album lifecycle rules on top of the persistence interface."""

    repository: PortalRepository
    photo_storage: PhotoStorage

    def get_customer_album(self, customer_id: int) -> dict[str, object]:
        """Return the customer's most recent album with photos and selection."""
        album = self.repository.get_album_by_customer_id(customer_id)
        if album is None:
            return {"album": None, "photos": [], "selectedIds": [], "approvedAt": None}
        photos = self.repository.get_photos_by_album_id(album.id)
        return {
            "album": {
                "id": album.id,
                "name": album.name,
                "event_date": album.event_date,
            },
            "photos": [
                {
                    "id": photo.id,
                    "url": photo_url(album.id, photo),
                    "filename": photo.filename,
                }
                for photo in photos
            ],
            "selectedIds": list(album.selected_photo_ids),
            "approvedAt": _isoformat(album.approved_at),
        }

    def set_selection(self, customer_id: int, raw_photo_ids: object) -> list[int]:
        """Replace the selection on the customer's most recent album.

        Ids are stored as submitted without checking album membership.
        """
        album = self._require_customer_album(customer_id)
        photo_ids = normalize_selection(raw_photo_ids)
        self.repository.set_album_selection(album.id, photo_ids)
        logger.info(
            "Album selection updated",
            extra={"album_id": album.id, "count": len(photo_ids)},
        )
        return photo_ids

    def approve(self, customer_id: int) -> None:
        """Record approval of the customer's most recent album."""
        album = self._require_customer_album(customer_id)
        self.repository.approve_album(album.id)
        logger.info("Album approved", extra={"album_id": album.id})

    def get_album_detail(self, album_id: int) -> dict[str, object]:
        """Return an album for operator review with per-photo selection flags."""
        album = self._require_album(album_id)
        photos = self.repository.get_photos_by_album_id(album.id)
        selected = set(album.selected_photo_ids)
        return {
            "album": serialize_album(album),
            "photos": [
                {
                    "id": photo.id,
                    "url": photo_url(album.id, photo),
                    "filename": photo.filename,
                    "selected": photo.id in selected,
                }
                for photo in photos
            ],
            "selectedIds": list(album.selected_photo_ids),
            "approvedAt": _isoformat(album.approved_at),
        }

    def prepare_upload(self, album_id: int) -> AlbumRecord:
        """Fail fast before upload bytes are read."""
        self.photo_storage.ensure_writable()
        return self._require_album(album_id)

    def add_photos(self, album_id: int, uploads: list[PhotoUpload]) -> int:
        """Store uploads and append them after the album's existing photos."""
        album = self.prepare_upload(album_id)
        if len(uploads) > MAX_UPLOAD_FILES:
            raise ValidationError(f"At most {MAX_UPLOAD_FILES} photos per upload.")
        order = len(self.repository.get_photos_by_album_id(album.id))
        for upload in uploads:
            filename = stored_filename(upload.filename)
            storage_path = self.photo_storage.save(
                album.id, filename, upload.content, upload.content_type
            )
            self.repository.add_photo(album.id, storage_path, filename, order)
            order += 1
        logger.info(
            "Photos uploaded", extra={"album_id": album.id, "count": len(uploads)}
        )
        return len(uploads)

    def locate_photo(self, album_id: int, filename: str) -> PhotoLocation:
        """Return where a stored photo can be served from."""
        if not is_record_id(album_id):
            raise NotFoundError()
        if filename != PurePosixPath(filename).name or filename in {"", ".", ".."}:
            raise NotFoundError()
        location = self.photo_storage.locate(album_id, filename)
        if location is None:
            raise NotFoundError()
        return location

    def _require_album(self, album_id: int) -> AlbumRecord:
        album = (
            self.repository.get_album_by_id(album_id)
            if is_record_id(album_id)
            else None
        )
        if album is None:
            raise NotFoundError("Album not found.")
        return album

    def _require_customer_album(self, customer_id: int) -> AlbumRecord:
        album = self.repository.get_album_by_customer_id(customer_id)
        if album is None:
            raise NotFoundError("Album not found.")
        return album


def serialize_album(album: AlbumRecord) -> dict[str, object]:
    """Return the full album row as JSON-friendly data."""
    return {
        "id": album.id,
        "customer_id": album.customer_id,
        "name": album.name,
        "event_date": album.event_date,
        "selected_photo_ids": list(album.selected_photo_ids),
        "approved_at": _isoformat(album.approved_at),
        "created_at": _isoformat(album.created_at),
    }


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
