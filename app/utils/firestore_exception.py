from functools import wraps
import logging

from fastapi import HTTPException, status

from app.availability.exceptions import AvailabilityError


logger = logging.getLogger(__name__)


def handle_firestore_exceptions(func):
    """
    Decorator to catch Firestore exceptions and raise HTTPExceptions.

    Availability errors pass through unchanged so callers can decide how to
    report them.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (HTTPException, AvailabilityError):
            raise
        except Exception as e:
            logger.exception(
                f"Unhandled exception in {func.__name__}: {e}",
                exc_info=True,
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Internal server error: {str(e)}",
            ) from e

    return wrapper
