"""
Session-bound create/query primitives used by resolvers and importers.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .exceptions import EntityCreationError
from .scopes import QueryScope

logger = logging.getLogger(__name__)


class EntityStore:
    """Thin persistence port over one SQLAlchemy session."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, model, fields: Dict[str, Any]):
        """Insert one row and flush so constraint violations surface here."""
        entity = model(**fields)
        self.session.add(entity)
        try:
            self.session.flush()
        except IntegrityError as exc:
            raise EntityCreationError(model.__tablename__, str(exc.orig)) from exc
        return entity

    def query(self, model, fields: Sequence[str], scope: Optional[QueryScope] = None) -> List[Dict[str, Any]]:
        """Return ``fields`` plus ``id`` for every row matching ``scope``."""
        columns = [getattr(model, field) for field in fields]
        statement = select(model.id, *columns)
        if scope is not None:
            statement = scope.apply(statement, model)
        rows = self.session.execute(statement).all()
        return [row._asdict() for row in rows]
