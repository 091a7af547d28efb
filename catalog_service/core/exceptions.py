"""Error kinds raised by the catalog, authenticator and permission gate.

Business-rule violations (duplicate isbn, unknown id, bad pagination, ...) are
expected outcomes. Store and integrity failures carry a generic message only;
their detail is logged where they occur and never reaches the caller.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse


class CatalogServiceError(Exception):
    """Base class for all service errors."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be completed."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        self.error_code = self.__class__.__name__
        super().__init__(self.message)


class IsbnExists(CatalogServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "A book with this ISBN already exists."


class IsbnMismatch(CatalogServiceError):
    default_message = "The ISBN of an existing book cannot be changed."


class IdNotFound(CatalogServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "No record with this id was found."


class IsbnNotFound(CatalogServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "No book with this ISBN was found."


class UsernameExists(CatalogServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "This username is already taken."


class PaginationInvalid(CatalogServiceError):
    default_message = "The requested page is beyond the end of the results."


class UnknownPermission(CatalogServiceError):
    default_message = "The permission mask contains unknown action bits."


class DatabaseError(CatalogServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error."


class Unauthorized(CatalogServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated."


class Forbidden(CatalogServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "User lacks the permissions required to perform this action."


class InternalServerError(CatalogServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error."


async def catalog_service_error_handler(request: Request, exc: CatalogServiceError) -> JSONResponse:
    """Render a service error as JSON with its status code."""
    headers = None
    if isinstance(exc, Unauthorized):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.error_code},
        headers=headers,
    )
