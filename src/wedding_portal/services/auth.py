"""Customer authentication and stateless session tokens."""

import hmac
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

import bcrypt
import jwt

from wedding_portal.domain.models import CustomerRecord, is_record_id
from wedding_portal.errors import (
    AuthenticationError,
    ForbiddenError,
    UnauthorizedError,
    ValidationError,
)
from wedding_portal.services.repository import PortalRepository

logger = logging.getLogger(__name__)

_BCRYPT_ROUNDS = 10
# bcrypt only reads the first 72 bytes; newer releases reject longer input.
MAX_PASSWORD_BYTES = 72
_TOKEN_ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash for a password."""
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            f"Password must be at most {MAX_PASSWORD_BYTES} bytes."
        )
    salt = bcrypt.gensalt(rounds=_BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Return true when the password matches the stored hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


class TokenSigner(Protocol):
    """Signs and verifies session claims."""

    def sign(self, claims: dict[str, object]) -> str:
        """Return a signed token carrying the claims."""

    def verify(self, token: str) -> dict[str, object]:
        """Return the claims of a valid token or raise UnauthorizedError."""


@dataclass
class JwtTokenSigner(TokenSigner):
    """HMAC-signed JWT implementation of the token signer."""

    secret: str
    max_age: timedelta

    def sign(self, claims: dict[str, object]) -> str:
        """Sign claims with issue and expiry timestamps."""
        now = datetime.now(tz=UTC)
        payload = {**claims, "iat": now, "exp": now + self.max_age}
        return jwt.encode(payload, self.secret, algorithm=_TOKEN_ALGORITHM)

    def verify(self, token: str) -> dict[str, object]:
        """Verify signature and expiry, requiring a subject claim."""
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[_TOKEN_ALGORITHM],
                options={"require": ["exp", "sub"]},
            )
        except jwt.PyJWTError as exc:
            raise UnauthorizedError() from exc


@dataclass
class AuthService:
    """Logs customers in and resolves session tokens to customer ids."""

    repository: PortalRepository
    signer: TokenSigner

    def login(
        self, username: str | None, password: str | None
    ) -> tuple[str, CustomerRecord]:
        """Check credentials and return a session token with the customer."""
        if not username or not username.strip() or not password:
            raise ValidationError("Username and password are required.")
        customer = self.repository.get_customer_by_username(username.strip())
        if customer is None or not customer.password_hash:
            logger.info("Customer login rejected")
            raise AuthenticationError()
        if not verify_password(password, customer.password_hash):
            logger.info("Customer login rejected", extra={"customer_id": customer.id})
            raise AuthenticationError()
        token = self.signer.sign({"sub": str(customer.id)})
        logger.info("Customer logged in", extra={"customer_id": customer.id})
        return token, customer

    def authorize(self, token: str | None) -> int:
        """Return the customer id carried by a valid session token."""
        if not token:
            raise UnauthorizedError()
        claims = self.signer.verify(token)
        subject = claims.get("sub")
        try:
            customer_id = int(str(subject))
        except ValueError as exc:
            raise UnauthorizedError() from exc
        if not is_record_id(customer_id):
            raise UnauthorizedError()
        return customer_id

    def get_customer(self, customer_id: int) -> CustomerRecord:
        """Return the session's customer, rejecting deleted customers."""
        customer = self.repository.get_customer_by_id(customer_id)
        if customer is None:
            raise UnauthorizedError()
        return customer


@dataclass
class AdminGate:
    """Shared-secret check guarding operator routes."""

    secret: str

    def check(self, supplied: str | None) -> None:
        """Raise ForbiddenError unless the supplied secret matches."""
        if not supplied or not hmac.compare_digest(
            supplied.encode("utf-8"), self.secret.encode("utf-8")
        ):
            raise ForbiddenError()
