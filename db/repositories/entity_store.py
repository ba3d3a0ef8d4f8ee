"""
Entity store: lookup and creation primitives for the six ingested record kinds.

One EntityStore wraps one Session. Each create runs inside its own SAVEPOINT
so a rejected insert leaves the enclosing row transaction usable.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from db.base import Base
from db.repositories.errors import ConstraintViolation, PersistenceError, WriteRejectedError

EntityT = TypeVar("EntityT", bound=Base)

# Out-of-range values can fail in the driver before SQLAlchemy wraps the error.
_DRIVER_ERRORS = (SQLAlchemyError, OverflowError, ValueError)


class EntityStore:
    """
    Find/create access to entity tables plus row-level commit and rollback.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def find_one(self, model: type[EntityT], key: Mapping[str, Any]) -> EntityT | None:
        """
        Return the first record whose key fields all match, or None.

        A None key value matches SQL NULL.
        """

        stmt = select(model)
        for field_name, value in key.items():
            column = getattr(model, field_name)
            stmt = stmt.where(column.is_(None) if value is None else column == value)

        try:
            return self._session.execute(stmt.limit(1)).scalars().first()
        except _DRIVER_ERRORS as exc:
            raise PersistenceError(f"Failed to look up {model.__name__}.") from exc

    def create(self, model: type[EntityT], fields: Mapping[str, Any]) -> EntityT:
        """
        Insert one record and flush it so its identity is assigned.
        """

        self._check_required(model, fields)
        entity = model(**fields)
        try:
            with self._session.begin_nested():
                self._session.add(entity)
                self._session.flush()
        except IntegrityError as exc:
            raise ConstraintViolation(model.__name__, _first_line(exc.orig)) from exc
        except _DRIVER_ERRORS as exc:
            raise PersistenceError(f"Failed to create {model.__name__}.") from exc
        return entity

    def commit(self) -> None:
        try:
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise PersistenceError("Failed to commit ingested records.") from exc

    def rollback(self) -> None:
        self._session.rollback()

    @staticmethod
    def _check_required(model: type[Base], fields: Mapping[str, Any]) -> None:
        missing = [
            column.key
            for column in model.__table__.columns
            if not column.nullable
            and not column.primary_key
            and column.default is None
            and column.server_default is None
            and fields.get(column.key) is None
        ]
        if missing:
            raise WriteRejectedError(
                f"{model.__name__} is missing required value(s): {', '.join(sorted(missing))}."
            )


def _first_line(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text.splitlines()[0] if text else None
