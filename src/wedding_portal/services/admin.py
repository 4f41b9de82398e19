"""Admin directory: customer and album provisioning."""

import logging
from dataclasses import dataclass

from wedding_portal.domain.models import CustomerSummary, is_record_id
from wedding_portal.errors import NotFoundError, ValidationError
from wedding_portal.services.albums import AlbumService, PhotoUpload, serialize_album
from wedding_portal.services.auth import hash_password
from wedding_portal.services.repository import PortalRepository

logger = logging.getLogger(__name__)


@dataclass
class AdminService:
    """Operator commands that delegate to persistence and the album workflow."""

    repository: PortalRepository
    album_service: AlbumService

    def list_customers(self) -> list[dict[str, object]]:
        """Return customers with their album summary."""
        return [
            _serialize_summary(row) for row in self.repository.get_all_customers()
        ]

    def create_customer(
        self, username: str | None, password: str | None, name: str | None
    ) -> int:
        """Create a customer with a hashed password."""
        if not (username or "").strip() or not (password or "").strip():
            raise ValidationError("Username and password are required.")
        password_hash = hash_password(password.strip())
        customer_id = self.repository.create_customer(
            username.strip(),
            password_hash,
            (name or "").strip() or None,
        )
        logger.info("Customer created", extra={"customer_id": customer_id})
        return customer_id

    def create_album(
        self, customer_id: object, name: str | None, event_date: str | None
    ) -> int:
        """Create an empty album for an existing customer."""
        resolved_id = _parse_id(customer_id, "customer_id")
        if self.repository.get_customer_by_id(resolved_id) is None:
            raise NotFoundError("Customer not found.")
        album_id = self.repository.create_album(
            resolved_id,
            (name or "").strip() or None,
            (event_date or "").strip() or None,
        )
        logger.info(
            "Album created", extra={"album_id": album_id, "customer_id": resolved_id}
        )
        return album_id

    def list_albums(self, customer_id: object) -> list[dict[str, object]]:
        """Return a customer's albums, newest first."""
        resolved_id = _parse_id(customer_id, "customer_id")
        return [
            serialize_album(album)
            for album in self.repository.get_albums_by_customer_id(resolved_id)
        ]

    def get_album(self, album_id: int) -> dict[str, object]:
        """Return an album with full photo detail."""
        return self.album_service.get_album_detail(album_id)

    def upload_photos(self, album_id: int, uploads: list[PhotoUpload]) -> int:
        """Append uploaded photos to an album."""
        return self.album_service.add_photos(album_id, uploads)


def _parse_id(value: object, field: str) -> int:
    if value is None or value == "" or isinstance(value, bool):
        raise ValidationError(f"{field} is required.")
    try:
        parsed = int(str(value).strip())
    except ValueError as exc:
        raise ValidationError(f"{field} must be numeric.") from exc
    if not is_record_id(parsed):
        raise ValidationError(f"{field} is out of range.")
    return parsed


def _serialize_summary(row: CustomerSummary) -> dict[str, object]:
    return {
        "id": row.id,
        "username": row.username,
        "name": row.name,
        "created_at": row.created_at.isoformat() if row.created_at else None,
        "album_id": row.album_id,
        "album_name": row.album_name,
        "approved_at": row.approved_at.isoformat() if row.approved_at else None,
    }
