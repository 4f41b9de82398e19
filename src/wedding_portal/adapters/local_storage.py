"""Filesystem storage for photo bytes and site content documents."""

import json
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from wedding_portal.domain.content import document_filename
from wedding_portal.errors import BackendUnavailableError, NotConfiguredError
from wedding_portal.services.albums import PhotoLocation, PhotoStorage
from wedding_portal.services.content import ContentStore

logger = logging.getLogger(__name__)

_READ_ONLY_MESSAGE = (
    "The filesystem is read-only; configure Supabase to store {what}."
)


@dataclass
class LocalPhotoStorage(PhotoStorage):
    """Stores photos under ``<root>/albums/<album_id>/<filename>``."""

    root: Path
    read_only: bool = False

    def ensure_writable(self) -> None:
        """Reject uploads on a read-only filesystem."""
        if self.read_only:
            raise NotConfiguredError(_READ_ONLY_MESSAGE.format(what="photo uploads"))

    def save(
        self,
        album_id: int,
        filename: str,
        content: BinaryIO,
        content_type: str | None,
    ) -> str:
        """Copy the photo stream to disk and return the file path."""
        self.ensure_writable()
        target = self._album_dir(album_id) / filename
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with target.open("wb") as handle:
                shutil.copyfileobj(content, handle)
        except OSError as exc:
            logger.exception("Photo write failed", extra={"path": str(target)})
            raise BackendUnavailableError("Could not store the photo.") from exc
        return str(target)

    def locate(self, album_id: int, filename: str) -> PhotoLocation | None:
        """Return the file path when the photo exists."""
        target = self._album_dir(album_id) / filename
        if not target.is_file():
            return None
        return PhotoLocation(path=str(target))

    def _album_dir(self, album_id: int) -> Path:
        return self.root / "albums" / str(album_id)


@dataclass
class LocalContentStore(ContentStore):
    """Stores content documents as JSON files in a directory."""

    directory: Path
    read_only: bool = False

    def read(self, name: str) -> object | None:
        """Return the parsed document, or None when missing or unreadable."""
        path = self.directory / document_filename(name)
        if not path.is_file():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Content file unreadable", extra={"path": str(path)})
            return None

    def write(self, name: str, data: object) -> None:
        """Write the document as indented JSON."""
        if self.read_only:
            raise NotConfiguredError(
                _READ_ONLY_MESSAGE.format(what="content documents")
            )
        path = self.directory / document_filename(name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8"
            )
        except OSError as exc:
            logger.exception("Content write failed", extra={"path": str(path)})
            raise BackendUnavailableError("Could not write the file.") from exc
