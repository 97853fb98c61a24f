"""Error taxonomy shared by every service.

Each error carries a machine readable ``code``, a human readable ``message``
and the HTTP status it maps to. Services raise these; the application level
handler in ``main.py`` renders them.
"""
import math
from datetime import datetime
from typing import Any, Optional


class PortalError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None, details: Any = None):
        self.message = message or self.message
        self.code = code or self.code
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"error": self.message, "code": self.code}
        if self.details is not None:
            body["details"] = self.details
        return body


class Unauthenticated(PortalError):
    status_code = 401
    code = "NO_TOKEN"
    message = "Access token required"


class TokenInvalid(Unauthenticated):
    code = "INVALID_TOKEN"
    message = "Invalid token"


class TokenExpired(Unauthenticated):
    code = "TOKEN_EXPIRED"
    message = "Token expired"


class PrincipalNotFound(Unauthenticated):
    code = "USER_NOT_FOUND"
    message = "User not found"


class InvalidCredentials(Unauthenticated):
    code = "INVALID_CREDENTIALS"
    message = "Invalid credentials"


class Forbidden(PortalError):
    status_code = 403
    code = "ACCESS_DENIED"
    message = "Access denied"


class NotFound(PortalError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Resource not found"


class ValidationFailed(PortalError):
    status_code = 400
    code = "VALIDATION_ERROR"
    message = "Validation failed"


class Conflict(PortalError):
    status_code = 409
    code = "CONFLICT"
    message = "Conflict"


class DuplicateActive(Conflict):
    code = "DOCUMENT_EXISTS"
    message = "Document already uploaded and pending/verified"


class InvalidTransition(Conflict):
    code = "INVALID_TRANSITION"
    message = "Invalid document status transition"


class RateLimited(PortalError):
    status_code = 429
    code = "RATE_LIMIT_EXCEEDED"
    message = "Too many requests from this IP"

    def __init__(self, reset_at: datetime, message: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message, code)
        self.reset_at = reset_at

    @property
    def retry_after(self) -> int:
        return max(0, math.ceil((self.reset_at - datetime.utcnow()).total_seconds()))

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["resetTime"] = self.reset_at.isoformat() + "Z"
        return body


class ConfigError(PortalError):
    status_code = 500
    code = "CONFIG_ERROR"
    message = "Server is not configured"


class StorageError(PortalError):
    status_code = 500
    code = "STORAGE_ERROR"
    message = "Storage operation failed"
