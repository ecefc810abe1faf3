import logging

from fastapi import HTTPException, status

from app.core.exceptions import (
    FeeError,
    FeeValidationError,
    NoBillableCoursesError,
    NotFoundError,
    PersistenceError,
)

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    FeeValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    NoBillableCoursesError: 422,
    PersistenceError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def to_http_exception(error: FeeError) -> HTTPException:
    """Map a fee domain error to the HTTP error shown to the user."""
    code = _STATUS_CODES.get(type(error), status.HTTP_400_BAD_REQUEST)
    if isinstance(error, PersistenceError):
        logger.error("Fee request failed: %s", error)
    else:
        logger.warning("Fee request rejected: %s", error)
    return HTTPException(status_code=code, detail=str(error))
