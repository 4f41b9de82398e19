"""Application error taxonomy.

Every error carries a user-facing message and the HTTP status the API layer
responds with. Internal details belong in logs, never in the message.
"""


class PortalError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 500
    default_message = "Server error."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PortalError):
    """Missing or malformed input."""

    status_code = 400
    default_message = "Invalid request."


class AuthenticationError(PortalError):
    """Credentials did not match a customer."""

    status_code = 401
    default_message = "Invalid username or password."


class UnauthorizedError(PortalError):
    """Missing, tampered or expired session."""

    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(PortalError):
    """Wrong or missing admin secret."""

    status_code = 403
    default_message = "Forbidden"


class NotFoundError(PortalError):
    """Unknown customer, album or document."""

    status_code = 404
    default_message = "Not found."


class ConflictError(PortalError):
    """Unique constraint violation, e.g. a duplicate username."""

    status_code = 400
    default_message = "This username is already taken."


class BackendUnavailableError(PortalError):
    """The configured backend could not be reached or failed."""

    status_code = 500
    default_message = "Server error."


class NotConfiguredError(PortalError):
    """The operation needs a backend that is not configured."""

    status_code = 503
    default_message = "Storage backend is not configured."
