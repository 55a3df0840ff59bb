"""
Numeris - Error taxonomy

Every failure the API reports carries a machine-readable tag and an HTTP
status. Routes and repositories raise these; server.py renders them as
{"error": tag, "message": text}.
"""

from typing import Any, Dict, List, Optional


class AppError(Exception):
    status_code = 500
    error = "internal_error"

    def __init__(self, message: str, fields: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.message = message
        self.fields = fields

    def to_dict(self) -> Dict[str, Any]:
        body = {"error": self.error, "message": self.message}
        if self.fields:
            body["fields"] = self.fields
        return body


class ValidationError(AppError):
    status_code = 400
    error = "validation_error"


class EmptyInputError(ValidationError):
    error = "empty_input"


class NotFoundError(AppError):
    status_code = 404
    error = "not_found"


class UnauthorizedError(AppError):
    status_code = 401
    error = "unauthorized"


class PasswordMismatchError(UnauthorizedError):
    error = "password_mismatch"


# ==================== TOKENS ====================

class InvalidSignatureError(UnauthorizedError):
    error = "invalid_signature"


class TokenExpiredError(UnauthorizedError):
    error = "token_expired"


class TokenNotYetValidError(UnauthorizedError):
    error = "token_not_yet_valid"


class InvalidTokenError(UnauthorizedError):
    error = "invalid_token"


# ==================== INVOICES / STORAGE ====================

class ConflictError(AppError):
    status_code = 400
    error = "conflict"


class ImmutableInvoiceError(AppError):
    status_code = 409
    error = "immutable_invoice"


class PersistenceError(AppError):
    status_code = 500
    error = "persistence_error"
