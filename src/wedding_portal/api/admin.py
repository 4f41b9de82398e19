"""Admin API endpoints guarded by a shared secret."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Body, Depends, Header, Request
from starlette.datastructures import UploadFile

from wedding_portal.api.schemas import CreateAlbumRequest, CreateCustomerRequest
from wedding_portal.domain.content import CONTENT_DOCUMENTS
from wedding_portal.errors import NotFoundError
from wedding_portal.services.albums import MAX_UPLOAD_FILES, PhotoUpload

if TYPE_CHECKING:
    from wedding_portal.containers import AppContainer


async def require_admin(
    request: Request, x_admin_secret: str | None = Header(default=None)
) -> None:
    """Ensure requests carry the configured admin secret."""
    container: AppContainer = request.app.state.container
    container.admin_gate.check(x_admin_secret)


router = APIRouter(prefix="/api", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/admin/customers")
async def list_customers(request: Request) -> list[dict[str, object]]:
    """Return customers joined with an album summary."""
    container: AppContainer = request.app.state.container
    return container.admin_service.list_customers()


@router.post("/admin/customers")
async def create_customer(
    payload: CreateCustomerRequest, request: Request
) -> dict[str, object]:
    """Create a customer account."""
    container: AppContainer = request.app.state.container
    customer_id = container.admin_service.create_customer(
        payload.username, payload.password, payload.name
    )
    return {"ok": True, "id": customer_id}


@router.post("/admin/albums")
async def create_album(
    payload: CreateAlbumRequest, request: Request
) -> dict[str, object]:
    """Create an album for a customer."""
    container: AppContainer = request.app.state.container
    album_id = container.admin_service.create_album(
        payload.customer_id, payload.name, payload.event_date
    )
    return {"ok": True, "id": album_id}


@router.get("/admin/albums")
async def list_albums(
    request: Request, customer_id: str | None = None
) -> list[dict[str, object]]:
    """Return a customer's albums, newest first."""
    container: AppContainer = request.app.state.container
    return container.admin_service.list_albums(customer_id)


@router.get("/admin/albums/{album_id}")
async def album_detail(album_id: int, request: Request) -> dict[str, object]:
    """Return an album with photos flagged by selection."""
    container: AppContainer = request.app.state.container
    return container.admin_service.get_album(album_id)


@router.post("/admin/albums/{album_id}/photos")
async def upload_photos(album_id: int, request: Request) -> dict[str, object]:
    """Store uploaded photos from the multipart ``photos`` field."""
    container: AppContainer = request.app.state.container
    container.album_service.prepare_upload(album_id)
    async with request.form(max_files=MAX_UPLOAD_FILES) as form:
        uploads = [
            PhotoUpload(
                filename=item.filename,
                content=item.file,
                content_type=item.content_type,
            )
            for item in form.getlist("photos")
            if isinstance(item, UploadFile)
        ]
        count = container.admin_service.upload_photos(album_id, uploads)
    return {"ok": True, "count": count}


@router.post("/save-{document}")
async def save_document(
    document: str, request: Request, data: Any = Body(...)
) -> dict[str, bool]:
    """Replace one of the site content documents."""
    if document not in CONTENT_DOCUMENTS:
        raise NotFoundError()
    container: AppContainer = request.app.state.container
    container.content_service.save(document, data)
    return {"ok": True}
