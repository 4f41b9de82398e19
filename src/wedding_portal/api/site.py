"""Public endpoints for site content and album photo files."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse, RedirectResponse, Response

from wedding_portal.domain.content import document_from_filename
from wedding_portal.errors import NotFoundError

if TYPE_CHECKING:
    from wedding_portal.containers import AppContainer

router = APIRouter(tags=["site"])


@router.get("/api/data/{filename}")
async def content_document(filename: str, request: Request) -> Any:
    """Return a site content document by filename, e.g. ``gallery.json``."""
    name = document_from_filename(filename)
    if name is None:
        raise NotFoundError()
    container: AppContainer = request.app.state.container
    return container.content_service.get(name)


@router.get("/uploads/albums/{album_id}/{filename}")
async def album_photo(album_id: int, filename: str, request: Request) -> Response:
    """Serve a stored photo or redirect to its public URL."""
    container: AppContainer = request.app.state.container
    location = container.album_service.locate_photo(album_id, filename)
    if location.path:
        return FileResponse(location.path)
    if location.url:
        return RedirectResponse(location.url)
    raise NotFoundError()
