"""Error taxonomy shared by the flows, the session guard and the HTTP layer"""

from typing import Any, Dict, List, Optional


class AuthServiceError(Exception):
    """Base class for errors that map onto a client-facing response."""

    status_code = 500
    error = "ServerError"
    message = "Unexpected server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, "error": self.error, "message": self.message}


class ValidationError(AuthServiceError):
    """Raised when input fails field-level validation. Carries every field error."""

    status_code = 400
    error = "ValidationError"
    message = "Validation failed"

    def __init__(self, errors: List[Dict[str, str]], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["errors"] = self.errors
        return body


class DuplicateField(AuthServiceError):
    """Raised when a unique employee attribute is already registered."""

    status_code = 400
    error = "DuplicateField"
    field = ""

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["field"] = self.field
        return body


class DuplicatePhone(DuplicateField):
    field = "phone_number"
    message = "Phone number already registered"


class DuplicateIdentification(DuplicateField):
    field = "identification_number"
    message = "Identification number already registered"


class InvalidCredentials(AuthServiceError):
    """Bad employee code or bad password. The two cases are indistinguishable."""

    status_code = 401
    error = "InvalidCredentials"
    message = "Invalid employee code or password"


class Unauthenticated(AuthServiceError):
    """No usable identity on a protected request."""

    status_code = 401
    error = "Unauthenticated"
    message = "Access denied. No token provided."


class InvalidToken(Unauthenticated):
    error = "InvalidToken"
    message = "Invalid token."


class TokenExpired(Unauthenticated):
    error = "TokenExpired"
    message = "Token expired."


class CodeSpaceExhausted(AuthServiceError):
    """No free employee code was found within the configured attempt budget."""

    error = "CodeSpaceExhausted"
    message = "Could not allocate a unique employee code"


class ServerError(AuthServiceError):
    """Unexpected failure. Details stay in the server log."""
