"""
Domain exceptions shared by all services.

Services raise these for business rule violations; routers convert them
to HTTP responses using the ``status_code`` each one carries.
"""


class DomainError(Exception):
    """Base exception for all service-level errors."""

    status_code = 400


class BadRequestError(DomainError):
    """Raised when input is malformed or a required field is missing."""

    status_code = 400


class ForbiddenError(DomainError):
    """Raised when the caller is authenticated but lacks the required role."""

    status_code = 403


class NotFoundError(DomainError):
    """Raised when a record does not exist or is not visible to the caller."""

    status_code = 404


class ConflictError(DomainError):
    """Raised when the request conflicts with existing state."""

    status_code = 409


class GoneError(DomainError):
    """Raised when a resource existed but can no longer be used."""

    status_code = 410
