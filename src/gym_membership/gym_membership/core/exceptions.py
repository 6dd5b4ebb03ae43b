from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    ``details`` carries structured context (measured distance, next opening
    time, the existing record, ...) for callers that render their own message.
    """

    http_status = 400

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class BadRequestError(DomainError):
    """Raised when input is malformed or a required association is missing."""

    http_status = 400


class NotFoundError(DomainError):
    """Raised when an identity or record cannot be found."""

    http_status = 404


class ForbiddenError(DomainError):
    """Raised when a business rule blocks entry or an action."""

    http_status = 403


class ConflictError(DomainError):
    """Raised when a write would duplicate an existing record."""

    http_status = 409


class DuplicateAttendanceError(ConflictError):
    """The (member, date) uniqueness constraint rejected an attendance write."""


class DuplicateReceiptError(ConflictError):
    """The receipt number uniqueness constraint rejected a payment write."""


class InvalidStateError(DomainError):
    """Raised when a lifecycle precondition (freeze/unfreeze, retraction) is violated."""

    http_status = 409
