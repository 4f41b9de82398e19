"""Customer portal endpoints backed by a signed session cookie."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Cookie, Depends, Request, Response

from wedding_portal.api.schemas import LoginRequest, SelectionRequest

if TYPE_CHECKING:
    from wedding_portal.config import Settings
    from wedding_portal.containers import AppContainer

SESSION_COOKIE = "customer_session"

router = APIRouter(prefix="/api", tags=["customer"])


async def require_customer(
    request: Request, customer_session: str | None = Cookie(default=None)
) -> int:
    """Resolve the session cookie to a customer id."""
    container: AppContainer = request.app.state.container
    return container.auth_service.authorize(customer_session)


@router.post("/customer-login")
async def customer_login(
    payload: LoginRequest, request: Request, response: Response
) -> dict[str, object]:
    """Check credentials and start a session."""
    container: AppContainer = request.app.state.container
    token, customer = container.auth_service.login(payload.username, payload.password)
    _set_session_cookie(response, token, container.settings)
    return {
        "ok": True,
        "customer": {
            "id": customer.id,
            "username": customer.username,
            "name": customer.name,
        },
    }


@router.post("/customer-logout")
async def customer_logout(request: Request, response: Response) -> dict[str, bool]:
    """Tell the client to drop its session cookie."""
    container: AppContainer = request.app.state.container
    response.delete_cookie(
        SESSION_COOKIE,
        httponly=True,
        samesite="lax",
        secure=container.settings.cookie_secure,
    )
    return {"ok": True}


@router.get("/customer/me")
async def customer_me(
    request: Request, customer_id: int = Depends(require_customer)
) -> dict[str, object]:
    """Return the logged-in customer."""
    container: AppContainer = request.app.state.container
    customer = container.auth_service.get_customer(customer_id)
    created_at = customer.created_at
    return {
        "id": customer.id,
        "username": customer.username,
        "name": customer.name,
        "created_at": created_at.isoformat() if created_at else None,
    }


@router.get("/customer/album")
async def customer_album(
    request: Request, customer_id: int = Depends(require_customer)
) -> dict[str, object]:
    """Return the customer's album, photos and current selection."""
    container: AppContainer = request.app.state.container
    return container.album_service.get_customer_album(customer_id)


@router.put("/customer/selection")
async def customer_selection(
    payload: SelectionRequest,
    request: Request,
    customer_id: int = Depends(require_customer),
) -> dict[str, bool]:
    """Replace the customer's photo selection."""
    container: AppContainer = request.app.state.container
    container.album_service.set_selection(customer_id, payload.photo_ids)
    return {"ok": True}


@router.post("/customer/approve")
async def customer_approve(
    request: Request, customer_id: int = Depends(require_customer)
) -> dict[str, bool]:
    """Approve the customer's selection."""
    container: AppContainer = request.app.state.container
    container.album_service.approve(customer_id)
    return {"ok": True}


def _set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=settings.session_max_age_days * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )
