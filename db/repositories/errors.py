"""
Repository-layer exceptions for the entity store.
"""

from __future__ import annotations


class EntityStoreError(Exception):
    """Base exception for entity store failures."""


class ConstraintViolation(EntityStoreError):
    """Raised when the database rejects a write because a unique key is already taken."""

    def __init__(self, kind: str, detail: str | None = None) -> None:
        message = f"{kind} violates a uniqueness constraint."
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)
        self.kind = kind


class PersistenceError(EntityStoreError):
    """Raised when the store is unreachable or rejects a read or write."""


class WriteRejectedError(PersistenceError):
    """Raised when a record is missing a value the store requires."""
