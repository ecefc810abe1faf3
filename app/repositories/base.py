import logging
from contextlib import contextmanager

from pymongo.errors import PyMongoError

from app.core.exceptions import PersistenceError

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(action: str):
    """Re-raise driver failures as PersistenceError, unretried."""
    try:
        yield
    except PyMongoError as e:
        logger.error("Record store failure while trying to %s: %s", action, e)
        raise PersistenceError(f"Failed to {action}: {e}") from e
