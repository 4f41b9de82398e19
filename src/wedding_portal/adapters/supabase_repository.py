"""Supabase (Postgres) portal repository for production."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from wedding_portal.domain.models import (
    AlbumRecord,
    CustomerRecord,
    CustomerSummary,
    PhotoRecord,
    dump_selection,
    parse_selection,
    pick_summary_album,
    summarize_customer,
)
from wedding_portal.errors import BackendUnavailableError, ConflictError
from wedding_portal.services.repository import PortalRepository

logger = logging.getLogger(__name__)

_UNIQUE_VIOLATION = "23505"
_CUSTOMER_COLUMNS = "id, username, name, created_at"
_ALBUM_COLUMNS = (
    "id, customer_id, name, event_date, selected_photo_ids, approved_at, created_at"
)
_PHOTO_COLUMNS = "id, album_id, path, filename, sort_order, created_at"


@dataclass
class SupabasePortalRepository(PortalRepository):
    """Supabase implementation for customers, albums and photos."""

    client: Client

    def create_customer(
        self, username: str, password_hash: str, name: str | None
    ) -> int:
        """Create a customer row and return its id."""
        response = _execute(
            self.client.table("customers").insert(
                {"username": username, "password_hash": password_hash, "name": name}
            )
        )
        if not response.data:
            raise BackendUnavailableError()
        return int(response.data[0]["id"])

    def get_customer_by_username(self, username: str) -> CustomerRecord | None:
        """Return the customer including its password hash."""
        response = _execute(
            self.client.table("customers")
            .select(f"{_CUSTOMER_COLUMNS}, password_hash")
            .eq("username", username)
            .limit(1)
        )
        if not response.data:
            return None
        return _to_customer(response.data[0], include_hash=True)

    def get_customer_by_id(self, customer_id: int) -> CustomerRecord | None:
        """Return the customer without its password hash."""
        response = _execute(
            self.client.table("customers")
            .select(_CUSTOMER_COLUMNS)
            .eq("id", customer_id)
            .limit(1)
        )
        if not response.data:
            return None
        return _to_customer(response.data[0])

    def create_album(
        self, customer_id: int, name: str | None, event_date: str | None
    ) -> int:
        """Create an album row and return its id."""
        response = _execute(
            self.client.table("albums").insert(
                {"customer_id": customer_id, "name": name, "event_date": event_date}
            )
        )
        if not response.data:
            raise BackendUnavailableError()
        return int(response.data[0]["id"])

    def get_album_by_customer_id(self, customer_id: int) -> AlbumRecord | None:
        """Return the most recently created album for a customer."""
        response = _execute(
            self.client.table("albums")
            .select(_ALBUM_COLUMNS)
            .eq("customer_id", customer_id)
            .order("created_at", desc=True)
            .order("id", desc=True)
            .limit(1)
        )
        if not response.data:
            return None
        return _to_album(response.data[0])

    def get_album_by_id(self, album_id: int) -> AlbumRecord | None:
        """Return an album by id."""
        response = _execute(
            self.client.table("albums")
            .select(_ALBUM_COLUMNS)
            .eq("id", album_id)
            .limit(1)
        )
        if not response.data:
            return None
        return _to_album(response.data[0])

    def get_albums_by_customer_id(self, customer_id: int) -> list[AlbumRecord]:
        """Return a customer's albums, newest first."""
        response = _execute(
            self.client.table("albums")
            .select(_ALBUM_COLUMNS)
            .eq("customer_id", customer_id)
            .order("created_at", desc=True)
            .order("id", desc=True)
        )
        return [_to_album(row) for row in response.data or []]

    def add_photo(
        self, album_id: int, storage_path: str, filename: str | None, sort_order: int
    ) -> int:
        """Create a photo row and return its id."""
        response = _execute(
            self.client.table("photos").insert(
                {
                    "album_id": album_id,
                    "path": storage_path,
                    "filename": filename,
                    "sort_order": sort_order,
                }
            )
        )
        if not response.data:
            raise BackendUnavailableError()
        return int(response.data[0]["id"])

    def get_photos_by_album_id(self, album_id: int) -> list[PhotoRecord]:
        """Return photos ordered by sort order then id."""
        response = _execute(
            self.client.table("photos")
            .select(_PHOTO_COLUMNS)
            .eq("album_id", album_id)
            .order("sort_order")
            .order("id")
        )
        return [_to_photo(row) for row in response.data or []]

    def set_album_selection(self, album_id: int, photo_ids: list[int]) -> None:
        """Overwrite the stored selection."""
        _execute(
            self.client.table("albums")
            .update({"selected_photo_ids": dump_selection(photo_ids)})
            .eq("id", album_id)
        )

    def approve_album(self, album_id: int) -> None:
        """Stamp the album as approved now."""
        _execute(
            self.client.table("albums")
            .update({"approved_at": datetime.now(tz=UTC).isoformat()})
            .eq("id", album_id)
        )

    def get_all_customers(self) -> list[CustomerSummary]:
        """Return customers, newest first, each with one album summary."""
        customers_response = _execute(
            self.client.table("customers")
            .select(_CUSTOMER_COLUMNS)
            .order("created_at", desc=True)
            .order("id", desc=True)
        )
        customers = [_to_customer(row) for row in customers_response.data or []]
        if not customers:
            return []
        albums_response = _execute(
            self.client.table("albums")
            .select(_ALBUM_COLUMNS)
            .in_("customer_id", [customer.id for customer in customers])
        )
        by_customer: dict[int, list[AlbumRecord]] = {}
        for row in albums_response.data or []:
            album = _to_album(row)
            by_customer.setdefault(album.customer_id, []).append(album)
        return [
            summarize_customer(
                customer, pick_summary_album(by_customer.get(customer.id, []))
            )
            for customer in customers
        ]


def _execute(query: Any) -> Any:
    """Run a PostgREST query, translating failures into portal errors."""
    try:
        return query.execute()
    except APIError as exc:
        if exc.code == _UNIQUE_VIOLATION:
            raise ConflictError() from exc
        logger.exception("Supabase query failed", extra={"code": exc.code})
        raise BackendUnavailableError() from exc
    except httpx.HTTPError as exc:
        logger.exception("Supabase unreachable")
        raise BackendUnavailableError() from exc


def _parse_datetime(value: object) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _to_customer(row: dict[str, Any], include_hash: bool = False) -> CustomerRecord:
    return CustomerRecord(
        id=int(row["id"]),
        username=row["username"],
        name=row.get("name"),
        created_at=_parse_datetime(row.get("created_at")),
        password_hash=row.get("password_hash") if include_hash else None,
    )


def _to_album(row: dict[str, Any]) -> AlbumRecord:
    return AlbumRecord(
        id=int(row["id"]),
        customer_id=int(row["customer_id"]),
        name=row.get("name"),
        event_date=row.get("event_date"),
        selected_photo_ids=parse_selection(row.get("selected_photo_ids")),
        approved_at=_parse_datetime(row.get("approved_at")),
        created_at=_parse_datetime(row.get("created_at")),
    )


def _to_photo(row: dict[str, Any]) -> PhotoRecord:
    return PhotoRecord(
        id=int(row["id"]),
        album_id=int(row["album_id"]),
        storage_path=row["path"],
        filename=row.get("filename"),
        sort_order=int(row.get("sort_order") or 0),
        created_at=_parse_datetime(row.get("created_at")),
    )
