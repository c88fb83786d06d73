"""Domain exceptions.

Routes never build error responses themselves: services raise one of these
and the handlers registered in ``shopdesk.api.app`` turn them into
``{"message": ...}`` envelopes.
"""

from __future__ import annotations


class ShopdeskError(Exception):
    """Base class for expected, client-facing errors."""

    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationFailedError(ShopdeskError):
    """Raised when input is missing, malformed or out of range."""

    status_code = 400


class NotFoundError(ShopdeskError):
    """Raised when a referenced entity does not exist."""

    status_code = 404

    def __init__(self, entity: str, entity_id: object | None = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")
