"""Repository used when the hosted backend is only partially configured."""

from dataclasses import dataclass

from wedding_portal.domain.models import (
    AlbumRecord,
    CustomerRecord,
    CustomerSummary,
    PhotoRecord,
)
from wedding_portal.errors import NotConfiguredError
from wedding_portal.services.repository import PortalRepository


@dataclass
class UnconfiguredPortalRepository(PortalRepository):
    """Reads return nothing and writes fail with NotConfiguredError."""

    reason: str = "Database is not configured."

    def create_customer(
        self, username: str, password_hash: str, name: str | None
    ) -> int:
        raise NotConfiguredError(self.reason)

    def get_customer_by_username(self, username: str) -> CustomerRecord | None:
        return None

    def get_customer_by_id(self, customer_id: int) -> CustomerRecord | None:
        return None

    def create_album(
        self, customer_id: int, name: str | None, event_date: str | None
    ) -> int:
        raise NotConfiguredError(self.reason)

    def get_album_by_customer_id(self, customer_id: int) -> AlbumRecord | None:
        return None

    def get_album_by_id(self, album_id: int) -> AlbumRecord | None:
        return None

    def get_albums_by_customer_id(self, customer_id: int) -> list[AlbumRecord]:
        return []

    def add_photo(
        self, album_id: int, storage_path: str, filename: str | None, sort_order: int
    ) -> int:
        raise NotConfiguredError(self.reason)

    def get_photos_by_album_id(self, album_id: int) -> list[PhotoRecord]:
        return []

    def set_album_selection(self, album_id: int, photo_ids: list[int]) -> None:
        raise NotConfiguredError(self.reason)

    def approve_album(self, album_id: int) -> None:
        raise NotConfiguredError(self.reason)

    def get_all_customers(self) -> list[CustomerSummary]:
        return []
