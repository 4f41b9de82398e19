"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from supabase import Client, create_client

from wedding_portal.adapters.local_storage import LocalContentStore, LocalPhotoStorage
from wedding_portal.adapters.sqlite_repository import SqlitePortalRepository
from wedding_portal.adapters.supabase_repository import SupabasePortalRepository
from wedding_portal.adapters.supabase_storage import (
    SupabaseContentStore,
    SupabasePhotoStorage,
)
from wedding_portal.adapters.unconfigured_repository import (
    UnconfiguredPortalRepository,
)
from wedding_portal.config import BackendKind, Settings, select_backend
from wedding_portal.services.admin import AdminService
from wedding_portal.services.albums import AlbumService, PhotoStorage
from wedding_portal.services.auth import AdminGate, AuthService, JwtTokenSigner
from wedding_portal.services.content import ContentService, ContentStore
from wedding_portal.services.repository import PortalRepository

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    backend: BackendKind
    auth_service: AuthService
    admin_gate: AdminGate
    album_service: AlbumService
    admin_service: AdminService
    content_service: ContentService
    close_resources: Callable[[], Awaitable[None]]


def build_repository(
    settings: Settings, backend: BackendKind, client: Client | None
) -> PortalRepository:
    """Create the repository for the selected backend."""
    if backend == "supabase":
        if client is None:
            logger.warning("Supabase URL set without a service key")
            return UnconfiguredPortalRepository(
                "Supabase credentials are incomplete."
            )
        return SupabasePortalRepository(client)
    return SqlitePortalRepository.create(settings.database_path)


def build_photo_storage(settings: Settings, client: Client | None) -> PhotoStorage:
    """Create photo byte storage, preferring Supabase Storage when configured."""
    if client is not None:
        return SupabasePhotoStorage(client, bucket=settings.storage_bucket)
    return LocalPhotoStorage(
        Path(settings.uploads_dir), read_only=settings.read_only_filesystem
    )


def build_content_store(settings: Settings, client: Client | None) -> ContentStore:
    """Create content document storage, preferring Supabase Storage."""
    if client is not None:
        return SupabaseContentStore(client, bucket=settings.storage_bucket)
    return LocalContentStore(
        Path(settings.data_dir), read_only=settings.read_only_filesystem
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    backend = select_backend(resolved_settings)
    supabase_client = (
        create_client(
            resolved_settings.supabase_url, resolved_settings.supabase_service_key
        )
        if resolved_settings.supabase_configured
        else None
    )
    repository = build_repository(resolved_settings, backend, supabase_client)
    signer = JwtTokenSigner(
        secret=resolved_settings.session_secret,
        max_age=timedelta(days=resolved_settings.session_max_age_days),
    )
    auth_service = AuthService(repository=repository, signer=signer)
    album_service = AlbumService(
        repository=repository,
        photo_storage=build_photo_storage(resolved_settings, supabase_client),
    )
    admin_service = AdminService(repository=repository, album_service=album_service)
    content_service = ContentService(
        store=build_content_store(resolved_settings, supabase_client),
        defaults_dir=Path(resolved_settings.data_dir),
    )

    async def close_resources() -> None:
        if isinstance(repository, SqlitePortalRepository):
            repository.engine.dispose()

    return AppContainer(
        settings=resolved_settings,
        backend=backend,
        auth_service=auth_service,
        admin_gate=AdminGate(resolved_settings.admin_secret),
        album_service=album_service,
        admin_service=admin_service,
        content_service=content_service,
        close_resources=close_resources,
    )
