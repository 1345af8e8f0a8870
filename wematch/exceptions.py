"""
API error taxonomy.

Services and route helpers raise these exceptions; the handlers
registered in the application factory render them as a JSON envelope::

    {"error": {"kind": "not_found", "message": "Skill not found."}}

Each subclass fixes its HTTP status and stable ``kind`` string.
"""


class ApiError(Exception):
    """Base class for errors that map to a client-visible response."""

    status_code = 500
    kind = "internal_error"
    default_message = "An unexpected error occurred."

    def __init__(self, message: str | None = None, details: dict | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details

    def to_dict(self) -> dict:
        """Return the JSON body for this error."""
        body = {"kind": self.kind, "message": self.message}
        if self.details:
            body["details"] = self.details
        return {"error": body}


class ValidationError(ApiError):
    """Malformed or out-of-range input (raised before any store access)."""

    status_code = 400
    kind = "validation_error"
    default_message = "The request is invalid."


class AuthenticationError(ApiError):
    """Missing, invalid or expired credential."""

    status_code = 401
    kind = "authentication_error"
    default_message = "Authentication is required."


class AuthorizationError(ApiError):
    """Valid credential, but the role does not allow the operation."""

    status_code = 403
    kind = "authorization_error"
    default_message = "You do not have permission to perform this action."


class NotFoundError(ApiError):
    """No record matches the id within the caller's scope."""

    status_code = 404
    kind = "not_found"
    default_message = "Resource not found."


class ConflictError(ApiError):
    """Uniqueness violation or removal of a record that is still in use."""

    status_code = 409
    kind = "conflict"
    default_message = "The request conflicts with existing data."


class InternalError(ApiError):
    """Unexpected store or storage failure."""
