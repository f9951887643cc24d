from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is missing, malformed or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced entity (shift, receipt, doctor, ...) does not exist."""


class ConflictError(DomainError):
    """Raised when an operation would break an invariant.

    ``code`` tells callers which invariant was hit (see ``ConflictCode``) and
    ``record`` optionally carries the conflicting entity, e.g. the shift that
    is still open when another one is requested.
    """

    def __init__(self, message: str, *, code: str = "conflict", record: Optional[Any] = None):
        super().__init__(message)
        self.code = code
        self.record = record


class StorageUnavailableError(DomainError):
    """Raised when the relational store cannot be reached."""
