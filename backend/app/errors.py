"""Error kinds shared by the store, the services and the HTTP layer.

Each kind carries the HTTP status it is reported with. Store functions raise
``NotFoundError`` and ``AlreadyExistsError``; workflows add the state-based
refusals; the exception handler in ``app.main`` turns any of them into a
``{"detail": ...}`` response.
"""

from sqlalchemy.exc import IntegrityError


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(ServiceError):
    status_code = 400


class UnauthenticatedError(ServiceError):
    status_code = 401


class ForbiddenError(ServiceError):
    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class AlreadyExistsError(ForbiddenError):
    """Uniqueness violation. Reported as 403 like other state-based refusals."""


class InternalError(ServiceError):
    status_code = 500


# MySQL ER_DUP_ENTRY
_UNIQUE_VIOLATION_CODES = {"1062"}


def is_unique_violation(exc: IntegrityError) -> bool:
    """Return True if the integrity error was raised by a unique constraint."""
    orig = getattr(exc, "orig", None)
    args = getattr(orig, "args", ()) or ()
    if args and str(args[0]) in _UNIQUE_VIOLATION_CODES:
        return True
    message = str(orig or exc)
    return "UNIQUE constraint failed" in message or "Duplicate entry" in message
