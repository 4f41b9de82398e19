"""Shared test fixtures."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import BinaryIO

import pytest
from fastapi.testclient import TestClient

from wedding_portal.adapters.local_storage import LocalContentStore, LocalPhotoStorage
from wedding_portal.api.app import create_app
from wedding_portal.config import Settings
from wedding_portal.containers import AppContainer, build_container
from wedding_portal.domain.models import (
    AlbumRecord,
    CustomerRecord,
    CustomerSummary,
    PhotoRecord,
    pick_summary_album,
    summarize_customer,
)
from wedding_portal.errors import ConflictError, NotConfiguredError
from wedding_portal.services.admin import AdminService
from wedding_portal.services.albums import AlbumService, PhotoLocation, PhotoStorage
from wedding_portal.services.auth import AdminGate, AuthService, JwtTokenSigner
from wedding_portal.services.content import ContentService, ContentStore
from wedding_portal.services.repository import PortalRepository

ADMIN_SECRET = "admin-secret"
ADMIN_HEADERS = {"X-Admin-Secret": ADMIN_SECRET}


@dataclass
class InMemoryPortalRepository(PortalRepository):
    """In-memory portal repository for tests."""

    customers: dict[int, CustomerRecord] = field(default_factory=dict)
    albums: dict[int, AlbumRecord] = field(default_factory=dict)
    photos: dict[int, PhotoRecord] = field(default_factory=dict)
    clock: datetime = field(default_factory=lambda: datetime(2025, 6, 1, tzinfo=UTC))
    _next_ids: dict[str, int] = field(default_factory=dict)

    def _next_id(self, kind: str) -> int:
        self._next_ids[kind] = self._next_ids.get(kind, 0) + 1
        return self._next_ids[kind]

    def _tick(self) -> datetime:
        self.clock += timedelta(seconds=1)
        return self.clock

    def create_customer(
        self, username: str, password_hash: str, name: str | None
    ) -> int:
        if any(c.username == username for c in self.customers.values()):
            raise ConflictError()
        customer_id = self._next_id("customer")
        self.customers[customer_id] = CustomerRecord(
            id=customer_id,
            username=username,
            name=name,
            created_at=self._tick(),
            password_hash=password_hash,
        )
        return customer_id

    def get_customer_by_username(self, username: str) -> CustomerRecord | None:
        for customer in self.customers.values():
            if customer.username == username:
                return customer
        return None

    def get_customer_by_id(self, customer_id: int) -> CustomerRecord | None:
        customer = self.customers.get(customer_id)
        if customer is None:
            return None
        return CustomerRecord(
            id=customer.id,
            username=customer.username,
            name=customer.name,
            created_at=customer.created_at,
        )

    def create_album(
        self, customer_id: int, name: str | None, event_date: str | None
    ) -> int:
        album_id = self._next_id("album")
        self.albums[album_id] = AlbumRecord(
            id=album_id,
            customer_id=customer_id,
            name=name,
            event_date=event_date,
            selected_photo_ids=(),
            approved_at=None,
            created_at=self._tick(),
        )
        return album_id

    def get_album_by_customer_id(self, customer_id: int) -> AlbumRecord | None:
        albums = self.get_albums_by_customer_id(customer_id)
        return albums[0] if albums else None

    def get_album_by_id(self, album_id: int) -> AlbumRecord | None:
        return self.albums.get(album_id)

    def get_albums_by_customer_id(self, customer_id: int) -> list[AlbumRecord]:
        return sorted(
            (a for a in self.albums.values() if a.customer_id == customer_id),
            key=lambda a: (a.created_at, a.id),
            reverse=True,
        )

    def add_photo(
        self, album_id: int, storage_path: str, filename: str | None, sort_order: int
    ) -> int:
        photo_id = self._next_id("photo")
        self.photos[photo_id] = PhotoRecord(
            id=photo_id,
            album_id=album_id,
            storage_path=storage_path,
            filename=filename,
            sort_order=sort_order,
            created_at=self._tick(),
        )
        return photo_id

    def get_photos_by_album_id(self, album_id: int) -> list[PhotoRecord]:
        return sorted(
            (p for p in self.photos.values() if p.album_id == album_id),
            key=lambda p: (p.sort_order, p.id),
        )

    def set_album_selection(self, album_id: int, photo_ids: list[int]) -> None:
        album = self.albums[album_id]
        self.albums[album_id] = _replace_album(
            album, selected_photo_ids=tuple(photo_ids)
        )

    def approve_album(self, album_id: int) -> None:
        album = self.albums[album_id]
        self.albums[album_id] = _replace_album(
            album, approved_at=datetime.now(tz=UTC)
        )

    def get_all_customers(self) -> list[CustomerSummary]:
        customers = sorted(
            self.customers.values(), key=lambda c: (c.created_at, c.id), reverse=True
        )
        return [
            summarize_customer(
                customer,
                pick_summary_album(self.get_albums_by_customer_id(customer.id)),
            )
            for customer in customers
        ]


def _replace_album(album: AlbumRecord, **changes: object) -> AlbumRecord:
    values = {
        "id": album.id,
        "customer_id": album.customer_id,
        "name": album.name,
        "event_date": album.event_date,
        "selected_photo_ids": album.selected_photo_ids,
        "approved_at": album.approved_at,
        "created_at": album.created_at,
    }
    values.update(changes)
    return AlbumRecord(**values)  # type: ignore[arg-type]


@dataclass
class InMemoryPhotoStorage(PhotoStorage):
    """In-memory photo storage for tests."""

    files: dict[str, bytes] = field(default_factory=dict)
    read_only: bool = False

    def ensure_writable(self) -> None:
        if self.read_only:
            raise NotConfiguredError("read-only")

    def save(
        self,
        album_id: int,
        filename: str,
        content: BinaryIO,
        content_type: str | None,
    ) -> str:
        self.ensure_writable()
        path = f"albums/{album_id}/{filename}"
        self.files[path] = content.read()
        return path

    def locate(self, album_id: int, filename: str) -> PhotoLocation | None:
        path = f"albums/{album_id}/{filename}"
        if path not in self.files:
            return None
        return PhotoLocation(url=f"https://cdn.example.com/{path}")


@dataclass
class InMemoryContentStore(ContentStore):
    """In-memory content store for tests."""

    documents: dict[str, object] = field(default_factory=dict)

    def read(self, name: str) -> object | None:
        return self.documents.get(name)

    def write(self, name: str, data: object) -> None:
        self.documents[name] = data


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        admin_secret=ADMIN_SECRET,
        session_secret="session-secret",
        supabase_url=None,
        supabase_service_key=None,
        database_path=str(tmp_path / "data" / "customers.db"),
        data_dir=str(tmp_path / "data"),
        uploads_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture
def repository() -> InMemoryPortalRepository:
    return InMemoryPortalRepository()


@pytest.fixture
def signer(settings: Settings) -> JwtTokenSigner:
    return JwtTokenSigner(
        secret=settings.session_secret,
        max_age=timedelta(days=settings.session_max_age_days),
    )


@pytest.fixture
def container(
    settings: Settings,
    repository: InMemoryPortalRepository,
    signer: JwtTokenSigner,
) -> AppContainer:
    album_service = AlbumService(
        repository=repository,
        photo_storage=LocalPhotoStorage(Path(settings.uploads_dir)),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        backend="sqlite",
        auth_service=AuthService(repository=repository, signer=signer),
        admin_gate=AdminGate(settings.admin_secret),
        album_service=album_service,
        admin_service=AdminService(repository=repository, album_service=album_service),
        content_service=ContentService(
            store=LocalContentStore(Path(settings.data_dir)),
            defaults_dir=Path(settings.data_dir),
        ),
        close_resources=close_resources,
    )


@pytest.fixture
def client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))


@pytest.fixture
def sqlite_client(settings: Settings) -> Iterator[TestClient]:
    """Client for an app wired by ``build_container`` on a real SQLite file."""
    with TestClient(create_app(build_container(settings))) as client:
        yield client
