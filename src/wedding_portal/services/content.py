"""Site content documents edited from the admin page."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from wedding_portal.domain.content import CONTENT_DOCUMENTS, document_filename
from wedding_portal.errors import BackendUnavailableError, NotFoundError

logger = logging.getLogger(__name__)


class ContentStore(Protocol):
    """Storage for site content documents."""

    def read(self, name: str) -> object | None:
        """Return a stored document, or None when absent."""

    def write(self, name: str, data: object) -> None:
        """Store a document, replacing any previous version."""


@dataclass
class ContentService:
    """Reads and writes allow-listed content documents."""

    store: ContentStore
    defaults_dir: Path

    def get(self, name: str) -> object:
        """Return a document, falling back to the bundled default."""
        self._require_known(name)
        try:
            data = self.store.read(name)
        except BackendUnavailableError:
            logger.warning("Content store read failed", extra={"document": name})
            data = None
        if data is not None:
            return data
        default = self._read_default(name)
        if default is None:
            raise NotFoundError()
        return default

    def save(self, name: str, data: object) -> None:
        """Replace a document."""
        self._require_known(name)
        self.store.write(name, data)
        logger.info("Content document saved", extra={"document": name})

    def _read_default(self, name: str) -> object | None:
        path = self.defaults_dir / document_filename(name)
        if not path.is_file():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Bundled content unreadable", extra={"path": str(path)})
            return None

    @staticmethod
    def _require_known(name: str) -> None:
        if name not in CONTENT_DOCUMENTS:
            raise NotFoundError()
