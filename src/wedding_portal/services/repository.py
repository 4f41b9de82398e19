"""Persistence interface shared by every backend."""

from typing import Protocol

from wedding_portal.domain.models import (
    AlbumRecord,
    CustomerRecord,
    CustomerSummary,
    PhotoRecord,
)


class PortalRepository(Protocol):
    """Data access for customers, albums, photos and selections.

    Implementations hold no business rules and must agree on shape, ordering
    and null semantics.
    """

    def create_customer(
        self, username: str, password_hash: str, name: str | None
    ) -> int:
        """Create a customer and return its id; duplicate usernames conflict."""

    def get_customer_by_username(self, username: str) -> CustomerRecord | None:
        """Return the customer with its password hash, if present."""

    def get_customer_by_id(self, customer_id: int) -> CustomerRecord | None:
        """Return the customer without its password hash, if present."""

    def create_album(
        self, customer_id: int, name: str | None, event_date: str | None
    ) -> int:
        """Create an album with an empty selection and return its id."""

    def get_album_by_customer_id(self, customer_id: int) -> AlbumRecord | None:
        """Return the customer's most recently created album, if any."""

    def get_album_by_id(self, album_id: int) -> AlbumRecord | None:
        """Return an album by id, if present."""

    def get_albums_by_customer_id(self, customer_id: int) -> list[AlbumRecord]:
        """Return the customer's albums, newest first."""

    def add_photo(
        self, album_id: int, storage_path: str, filename: str | None, sort_order: int
    ) -> int:
        """Add a photo row and return its id."""

    def get_photos_by_album_id(self, album_id: int) -> list[PhotoRecord]:
        """Return the album's photos ordered by (sort_order, id)."""

    def set_album_selection(self, album_id: int, photo_ids: list[int]) -> None:
        """Replace the album's selection wholesale."""

    def approve_album(self, album_id: int) -> None:
        """Set approved_at to the current time."""

    def get_all_customers(self) -> list[CustomerSummary]:
        """Return one row per customer joined with an album summary."""
