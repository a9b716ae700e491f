"""
Typed errors raised by the catalog and review services.

All of them derive from DRF's `APIException`, so a view can let them bubble
up and DRF turns them into a JSON response with the right status code. Code
outside the API layer (tests, management commands) catches them like any
other exception.
"""
import logging
from contextlib import contextmanager

from django.db import InterfaceError, OperationalError
from rest_framework import status
from rest_framework.exceptions import APIException

logger = logging.getLogger(__name__)


class DirectoryError(APIException):
    """Base class for every error the directory services report to callers."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'The request could not be processed.'
    default_code = 'error'

    @property
    def code(self):
        """The machine-readable code of this error, e.g. 'duplicate_review'."""
        return getattr(self.detail, 'code', self.default_code)


class ValidationError(DirectoryError):
    """Malformed input: a rating outside 1-5, a missing required field, a bad filter."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input.'
    default_code = 'invalid'


class AuthorizationError(DirectoryError):
    """The acting user is not allowed to do this (not the author, not the owner)."""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You do not have permission to perform this action.'
    default_code = 'forbidden'


class NotFoundError(DirectoryError):
    """A review, entity or category the caller referenced does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class ConflictError(DirectoryError):
    """The request clashes with existing state: duplicate review or reply, edit limit reached."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The request conflicts with the current state.'
    default_code = 'conflict'


class StoreError(DirectoryError):
    """The underlying database could not be reached. Never retried here."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'The data store is currently unavailable.'
    default_code = 'store_unavailable'


@contextmanager
def store_errors(operation):
    """
    Translates connection-level database failures into a `StoreError`.

    Integrity errors are deliberately not handled here: the services catch
    those themselves, because a uniqueness violation means something specific
    (a duplicate) to each of them.

    Args:
        operation (str): Short description used in the log line, e.g. 'submit review'.
    """
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        logger.error("Store failure during %s: %s", operation, exc)
        raise StoreError() from exc
