"""
Error taxonomy shared by services and routes.

Every error carries a machine-readable ``kind`` and the HTTP status it maps
to; ``app.py`` turns them into ``{"success": false, "error": {...}}``.
"""


class IncubridgeError(Exception):
    """Base exception for all IncuBridge errors."""

    kind = "server_error"
    status_code = 500

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message, "details": self.details}


class ValidationFailed(IncubridgeError):
    """Missing or invalid input."""

    kind = "validation"
    status_code = 400


class Unauthorized(IncubridgeError):
    """No credentials, or credentials that do not check out."""

    kind = "unauthorized"
    status_code = 401


class Forbidden(IncubridgeError):
    """Authenticated caller may not perform this operation."""

    kind = "forbidden"
    status_code = 403


class NotFound(IncubridgeError):
    kind = "not_found"
    status_code = 404


class Conflict(IncubridgeError):
    """Operation clashes with the current state of the resource."""

    kind = "conflict"
    status_code = 409


class RateLimited(IncubridgeError):
    kind = "rate_limited"
    status_code = 429
