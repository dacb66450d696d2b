# File: tazasu/core/errors.py

"""
Application error hierarchy.

Services and dependencies raise these; the handlers registered in
``tazasu.main`` turn them into JSON responses with the matching status code.
"""

from typing import Any, Dict, Optional


class AppError(Exception):
    """Base application error carrying an HTTP status and a stable code."""

    status_code: int = 500
    code: str = "APP_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "success": False,
            "detail": self.message,
            "code": self.code,
        }
        if self.details:
            result["details"] = self.details
        return result


# ---------- 400 ----------

class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details={"field": field} if field else None)
        self.field = field


class NoFieldsProvided(ValidationError):
    code = "NO_FIELDS_PROVIDED"

    def __init__(self, message: str = "No data provided for update"):
        super().__init__(message)


class InvalidStatus(ValidationError):
    code = "INVALID_STATUS"

    def __init__(self, status: str):
        super().__init__(
            "Invalid status. Allowed: pending, in_progress, resolved",
            field="status",
        )
        self.status = status


class ConflictError(AppError):
    status_code = 400
    code = "CONFLICT"


class DuplicateEmail(ConflictError):
    code = "DUPLICATE_EMAIL"

    def __init__(self, email: str):
        super().__init__("A user with this email already exists")
        self.email = email


class PayloadTooLarge(AppError):
    status_code = 400
    code = "PAYLOAD_REJECTED"


class UnsupportedType(PayloadTooLarge):
    code = "UNSUPPORTED_TYPE"

    def __init__(self, content_type: Optional[str]):
        super().__init__("Only images are allowed (JPEG, PNG, GIF)")
        self.content_type = content_type


class TooLarge(PayloadTooLarge):
    code = "FILE_TOO_LARGE"

    def __init__(self, limit_bytes: int):
        super().__init__(
            f"File is too large. Maximum size: {limit_bytes // (1024 * 1024)}MB"
        )
        self.limit_bytes = limit_bytes


class TooManyFiles(PayloadTooLarge):
    code = "TOO_MANY_FILES"

    def __init__(self, max_files: int):
        super().__init__(f"Too many files. Maximum: {max_files}")
        self.max_files = max_files


# ---------- 401 ----------

class AuthError(AppError):
    status_code = 401
    code = "AUTH_ERROR"


class MissingToken(AuthError):
    code = "MISSING_TOKEN"

    def __init__(self):
        super().__init__("Access token not provided")


class TokenInvalid(AuthError):
    code = "TOKEN_INVALID"

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class TokenExpired(AuthError):
    code = "TOKEN_EXPIRED"

    def __init__(self):
        super().__init__("Token expired")


class InvalidCredentials(AuthError):
    code = "INVALID_CREDENTIALS"

    def __init__(self):
        super().__init__("Invalid email or password")


class UserNotFound(AuthError):
    code = "USER_NOT_FOUND"

    def __init__(self):
        super().__init__("User not found")


# ---------- 403 / 404 / 429 / 500 ----------

class ForbiddenError(AppError):
    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class RateLimitExceeded(AppError):
    status_code = 429
    code = "RATE_LIMITED"

    def __init__(self, retry_after: int):
        super().__init__("Too many requests from your IP, please try again later")
        self.retry_after = retry_after


class InternalError(AppError):
    status_code = 500
    code = "INTERNAL_ERROR"
