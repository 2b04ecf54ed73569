"""
Generic repository over a SQLAlchemy session
"""
import logging
from typing import Any, List, Type

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.interfaces import IEntityRepository
from src.core.exceptions import InfrastructureException, PersistenceError

logger = logging.getLogger(__name__)


class EntityRepository(IEntityRepository):
    """Repository for any mapped entity type, bound to one session"""

    def __init__(self, session: Session):
        self._session = session

    def get_all(self, entity_type: Type[Any]) -> List[Any]:
        """Return every instance of an entity type, ordered by primary key"""
        try:
            query = self._session.query(entity_type)
            primary_key = inspect(entity_type).primary_key
            if primary_key:
                query = query.order_by(*primary_key)
            return query.all()
        except SQLAlchemyError as e:
            raise InfrastructureException(f"Database error retrieving {entity_type.__name__} list: {str(e)}")

    def add_all(self, records: List[Any]) -> int:
        """Stage records in the session without committing"""
        if not records:
            return 0
        self._session.add_all(records)
        return len(records)

    def commit(self):
        """Commit the session, rolling back and raising PersistenceError on failure"""
        try:
            self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            logger.error(f"Commit failed: {str(e)}")
            raise PersistenceError(f"Database error saving records: {str(e)}", details={"error": str(e)})

    def rollback(self):
        self._session.rollback()
