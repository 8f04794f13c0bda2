from fastapi import HTTPException, status

from core.exceptions import DuplicateEntityError, InvalidStateError, NotFoundError, ValidationError, YardError


def to_http_exception(exc: YardError) -> HTTPException:
    """Translate a domain error raised by a service into an HTTP error."""
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, (DuplicateEntityError, InvalidStateError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, ValidationError):
        detail = {"message": str(exc), "field": exc.field} if exc.field else str(exc)
        return HTTPException(status_code=422, detail=detail)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
