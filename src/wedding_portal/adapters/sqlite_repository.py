"""SQLite-backed portal repository for local development."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from sqlalchemy import Engine, create_engine, event, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from wedding_portal.adapters.sql_schema import AlbumRow, Base, CustomerRow, PhotoRow
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


@dataclass
class SqlitePortalRepository(PortalRepository):
    """SQLAlchemy implementation of the portal repository."""

    engine: Engine

    def __post_init__(self) -> None:
        self._sessions = sessionmaker(bind=self.engine, expire_on_commit=False)

    @classmethod
    def create(cls, database_path: str | Path) -> "SqlitePortalRepository":
        """Open (creating if needed) the database file and its schema."""
        path = Path(database_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(
            f"sqlite:///{path}", connect_args={"check_same_thread": False}
        )
        event.listen(engine, "connect", _enable_foreign_keys)
        Base.metadata.create_all(engine)
        return cls(engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with self._sessions.begin() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.exception("SQLite operation failed")
            raise BackendUnavailableError() from exc

    def create_customer(
        self, username: str, password_hash: str, name: str | None
    ) -> int:
        """Insert a customer row and return its id."""
        with self._session() as session:
            row = CustomerRow(username=username, password_hash=password_hash, name=name)
            session.add(row)
            try:
                session.flush()
            except IntegrityError as exc:
                raise ConflictError() from exc
            return row.id

    def get_customer_by_username(self, username: str) -> CustomerRecord | None:
        """Return the customer including its password hash."""
        with self._session() as session:
            row = session.scalars(
                select(CustomerRow).where(CustomerRow.username == username)
            ).first()
            if row is None:
                return None
            return _to_customer(row, include_hash=True)

    def get_customer_by_id(self, customer_id: int) -> CustomerRecord | None:
        """Return the customer without its password hash."""
        with self._session() as session:
            row = session.get(CustomerRow, customer_id)
            return _to_customer(row) if row else None

    def create_album(
        self, customer_id: int, name: str | None, event_date: str | None
    ) -> int:
        """Insert an album row and return its id."""
        with self._session() as session:
            row = AlbumRow(customer_id=customer_id, name=name, event_date=event_date)
            session.add(row)
            session.flush()
            return row.id

    def get_album_by_customer_id(self, customer_id: int) -> AlbumRecord | None:
        """Return the most recently created album for a customer."""
        albums = self.get_albums_by_customer_id(customer_id)
        return albums[0] if albums else None

    def get_album_by_id(self, album_id: int) -> AlbumRecord | None:
        """Return an album by id."""
        with self._session() as session:
            row = session.get(AlbumRow, album_id)
            return _to_album(row) if row else None

    def get_albums_by_customer_id(self, customer_id: int) -> list[AlbumRecord]:
        """Return a customer's albums, newest first."""
        with self._session() as session:
            rows = session.scalars(
                select(AlbumRow)
                .where(AlbumRow.customer_id == customer_id)
                .order_by(AlbumRow.created_at.desc(), AlbumRow.id.desc())
            ).all()
            return [_to_album(row) for row in rows]

    def add_photo(
        self, album_id: int, storage_path: str, filename: str | None, sort_order: int
    ) -> int:
        """Insert a photo row and return its id."""
        with self._session() as session:
            row = PhotoRow(
                album_id=album_id,
                path=storage_path,
                filename=filename,
                sort_order=sort_order,
            )
            session.add(row)
            session.flush()
            return row.id

    def get_photos_by_album_id(self, album_id: int) -> list[PhotoRecord]:
        """Return photos ordered by sort order then id."""
        with self._session() as session:
            rows = session.scalars(
                select(PhotoRow)
                .where(PhotoRow.album_id == album_id)
                .order_by(PhotoRow.sort_order, PhotoRow.id)
            ).all()
            return [_to_photo(row) for row in rows]

    def set_album_selection(self, album_id: int, photo_ids: list[int]) -> None:
        """Overwrite the stored selection."""
        with self._session() as session:
            session.execute(
                update(AlbumRow)
                .where(AlbumRow.id == album_id)
                .values(selected_photo_ids=dump_selection(photo_ids))
            )

    def approve_album(self, album_id: int) -> None:
        """Stamp the album as approved now."""
        with self._session() as session:
            session.execute(
                update(AlbumRow)
                .where(AlbumRow.id == album_id)
                .values(approved_at=datetime.now(tz=UTC))
            )

    def get_all_customers(self) -> list[CustomerSummary]:
        """Return customers, newest first, each with one album summary."""
        with self._session() as session:
            customers = session.scalars(
                select(CustomerRow).order_by(
                    CustomerRow.created_at.desc(), CustomerRow.id.desc()
                )
            ).all()
            albums = session.scalars(select(AlbumRow)).all()
            by_customer: dict[int, list[AlbumRecord]] = {}
            for album in albums:
                by_customer.setdefault(album.customer_id, []).append(_to_album(album))
            return [
                summarize_customer(
                    _to_customer(customer),
                    pick_summary_album(by_customer.get(customer.id, [])),
                )
                for customer in customers
            ]


def _enable_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _to_customer(row: CustomerRow, include_hash: bool = False) -> CustomerRecord:
    return CustomerRecord(
        id=row.id,
        username=row.username,
        name=row.name,
        created_at=_as_utc(row.created_at),
        password_hash=row.password_hash if include_hash else None,
    )


def _to_album(row: AlbumRow) -> AlbumRecord:
    return AlbumRecord(
        id=row.id,
        customer_id=row.customer_id,
        name=row.name,
        event_date=row.event_date,
        selected_photo_ids=parse_selection(row.selected_photo_ids),
        approved_at=_as_utc(row.approved_at),
        created_at=_as_utc(row.created_at),
    )


def _to_photo(row: PhotoRow) -> PhotoRecord:
    return PhotoRecord(
        id=row.id,
        album_id=row.album_id,
        storage_path=row.path,
        filename=row.filename,
        sort_order=row.sort_order,
        created_at=_as_utc(row.created_at),
    )

