"""Domain models for customers, albums and photos."""

import json
from dataclasses import dataclass, field
from datetime import datetime

# Ids are stored as signed 64-bit integers by both backends.
MAX_RECORD_ID = 2**63 - 1


@dataclass(frozen=True)
class CustomerRecord:
    """Represents a customer stored in the database.

    ``password_hash`` is only populated by username lookups used for login.
    """

    id: int
    username: str
    name: str | None
    created_at: datetime | None
    password_hash: str | None = field(default=None, repr=False)


@dataclass(frozen=True)
class AlbumRecord:
    """Represents a wedding album owned by one customer."""

    id: int
    customer_id: int
    name: str | None
    event_date: str | None
    selected_photo_ids: tuple[int, ...]
    approved_at: datetime | None
    created_at: datetime | None


@dataclass(frozen=True)
class PhotoRecord:
    """Represents a photo belonging to an album."""

    id: int
    album_id: int
    storage_path: str
    filename: str | None
    sort_order: int
    created_at: datetime | None


@dataclass(frozen=True)
class CustomerSummary:
    """Customer row joined with one album summary for the admin list."""

    id: int
    username: str
    name: str | None
    created_at: datetime | None
    album_id: int | None
    album_name: str | None
    approved_at: datetime | None


def parse_selection(raw: object) -> tuple[int, ...]:
    """Decode a stored selection; malformed values decode to an empty selection."""
    if raw is None or raw == "":
        return ()
    value = raw
    if isinstance(raw, str):
        try:
            value = json.loads(raw)
        except ValueError:
            return ()
    if not isinstance(value, list):
        return ()
    ids: list[int] = []
    for item in value:
        if isinstance(item, bool):
            continue
        if isinstance(item, int):
            ids.append(item)
        elif isinstance(item, float) and item.is_integer():
            ids.append(int(item))
    return tuple(ids)


def dump_selection(photo_ids: list[int] | tuple[int, ...]) -> str:
    """Encode a selection for storage."""
    return json.dumps(list(photo_ids))


def pick_summary_album(albums: list[AlbumRecord]) -> AlbumRecord | None:
    """Pick the album shown next to a customer in the admin list.

    The album with the latest ``approved_at`` wins; without any approval the
    most recently created album is used.
    """
    if not albums:
        return None
    approved = [album for album in albums if album.approved_at is not None]
    if approved:
        return max(approved, key=lambda album: (album.approved_at, album.id))
    return max(
        albums,
        key=lambda album: (
            album.created_at.timestamp() if album.created_at else float("-inf"),
            album.id,
        ),
    )


def summarize_customer(
    customer: CustomerRecord, album: AlbumRecord | None
) -> CustomerSummary:
    """Join a customer with its summary album."""
    return CustomerSummary(
        id=customer.id,
        username=customer.username,
        name=customer.name,
        created_at=customer.created_at,
        album_id=album.id if album else None,
        album_name=album.name if album else None,
        approved_at=album.approved_at if album else None,
    )


def is_record_id(value: int) -> bool:
    """Return true when the value fits the id column of every backend."""
    return 0 < value <= MAX_RECORD_ID
