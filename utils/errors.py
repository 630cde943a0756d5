"""
Domain errors for user management.

Closed set of error kinds that reach request handlers:
validation (400), conflict (400) and infrastructure (500).
Driver-specific failures are translated into these by the query gateway.
"""

from sqlalchemy.exc import IntegrityError

# MySQL: ER_DUP_ENTRY
MYSQL_DUPLICATE_ENTRY = 1062

MISSING_FIELDS_MESSAGE = "Tous les champs sont obligatoires"
DUPLICATE_LOGIN_MESSAGE = "Ce login existe déjà"
SERVER_ERROR_MESSAGE = "Erreur serveur"


class UserManagementError(Exception):
    """Base error; carries the HTTP status and the public message"""

    kind = "infrastructure"
    status_code = 500
    public_message = SERVER_ERROR_MESSAGE

    def __init__(self, message=None, cause=None):
        super().__init__(message or self.public_message)
        self.cause = cause


class ValidationError(UserManagementError):
    kind = "validation"
    status_code = 400
    public_message = MISSING_FIELDS_MESSAGE

    def __init__(self, missing_fields=(), message=None):
        super().__init__(message)
        self.missing_fields = list(missing_fields)


class StoreError(UserManagementError):
    """Failure raised by the store access layer"""


class ConflictError(StoreError):
    kind = "conflict"
    status_code = 400
    public_message = DUPLICATE_LOGIN_MESSAGE


class InfrastructureError(StoreError):
    kind = "infrastructure"
    status_code = 500
    public_message = SERVER_ERROR_MESSAGE


def is_unique_violation(exc):
    """Check whether a driver IntegrityError is a uniqueness violation"""
    orig = getattr(exc, "orig", None)
    args = getattr(orig, "args", ()) or ()

    # PyMySQL: IntegrityError(1062, "Duplicate entry 'x' for key 'login'")
    if args and args[0] == MYSQL_DUPLICATE_ENTRY:
        return True

    text = str(orig if orig is not None else exc)
    return "UNIQUE constraint failed" in text or "Duplicate entry" in text


def classify_store_error(exc):
    """
    Translate a driver/SQLAlchemy exception into a domain StoreError.

    Args:
        exc (Exception): exception raised while executing a statement

    Returns:
        StoreError: ConflictError for uniqueness violations,
        InfrastructureError for everything else
    """
    if isinstance(exc, StoreError):
        return exc

    if isinstance(exc, IntegrityError) and is_unique_violation(exc):
        return ConflictError(cause=exc)

    return InfrastructureError(cause=exc)


__all__ = [
    "UserManagementError",
    "ValidationError",
    "StoreError",
    "ConflictError",
    "InfrastructureError",
    "classify_store_error",
    "is_unique_violation",
    "MISSING_FIELDS_MESSAGE",
    "DUPLICATE_LOGIN_MESSAGE",
    "SERVER_ERROR_MESSAGE",
]
