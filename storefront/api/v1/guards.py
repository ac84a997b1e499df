"""Reusable existence check: resolve an {entity_id} path parameter or respond 404."""

from collections.abc import Callable
from typing import Annotated, Any, TypeVar

from fastapi import Depends, HTTPException, Path, status
from sqlalchemy.orm import Session

from storefront.core.database import get_db

T = TypeVar("T")

Lookup = Callable[[Session, int], Any]


def by_primary_key(model: type[T]) -> Callable[[Session, int], T | None]:
    """Default lookup: fetch the row by primary key."""

    def lookup(db: Session, entity_id: int) -> T | None:
        return db.get(model, entity_id)

    return lookup


def not_deleted(model: type[T]) -> Callable[[Session, int], T | None]:
    """Lookup for soft-deletable models: a row flagged is_delete counts as missing."""

    def lookup(db: Session, entity_id: int) -> T | None:
        entity = db.get(model, entity_id)
        if entity is None or getattr(entity, "is_delete", False):
            return None
        return entity

    return lookup


def require_entity(lookup: Lookup, detail: str) -> Callable[..., Any]:
    """
    Build a dependency for routes with an {entity_id} path parameter.

    The dependency returns the resolved entity so the handler does not query it
    again, and short-circuits with 404 when lookup returns None.
    """

    def dependency(
        entity_id: Annotated[int, Path(ge=1)],
        db: Annotated[Session, Depends(get_db)],
    ) -> Any:
        entity = lookup(db, entity_id)
        if entity is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
        return entity

    return dependency
