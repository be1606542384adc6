# storefront/domain/errors.py
"""
Bledy domenowe sklepu.

Serwisy rzucaja te wyjatki, a handlery w aplikacji FastAPI tlumacza je
na odpowiedz `{success: false, error, message}` z odpowiednim statusem.
"""


class StorefrontError(Exception):
    status_code = 500
    error = "Internal server error"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotAuthenticatedError(StorefrontError):
    status_code = 401
    error = "User not authenticated"


class ValidationFailedError(StorefrontError):
    status_code = 400
    error = "Validation failed"


class NotFoundError(StorefrontError):
    status_code = 404
    error = "Not found"


class ConflictError(StorefrontError):
    status_code = 409
    error = "Conflict"


class WriteRejectedError(StorefrontError):
    """Zapis zakonczyl sie bez bledu, ale nie objal zadnego wiersza (polityka RLS)."""

    status_code = 403
    error = "Write rejected"


class UpstreamError(StorefrontError):
    status_code = 500
    error = "Upstream failure"
