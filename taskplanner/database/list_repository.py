"""Repository for TaskList database operations."""

import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from taskplanner.database.models import ListDB
from taskplanner.models.catalog import ListCreate, ListUpdate, TaskList
from taskplanner.models.constants import DEFAULT_LIST_COLOR, DEFAULT_LIST_ICON, DEFAULT_LIST_NAME

logger = logging.getLogger(__name__)


class ListNotFoundError(ValueError):
    """Raised when a list ID does not exist."""


class DefaultListDeletionError(ValueError):
    """Raised when trying to delete the default inbox list."""


class ListRepository:
    """Repository for TaskList database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _get_db(self, list_id: str) -> Optional[ListDB]:
        return self.db.query(ListDB).filter(ListDB.id == list_id).first()

    def get_all(self) -> List[TaskList]:
        """Get all lists, default list first, then by creation date."""
        lists_db = self.db.query(ListDB).order_by(ListDB.is_default.desc(), ListDB.created_at).all()
        return [list_db.to_pydantic() for list_db in lists_db]

    def get(self, list_id: str) -> Optional[TaskList]:
        list_db = self._get_db(list_id)
        return list_db.to_pydantic() if list_db else None

    def get_default(self) -> Optional[TaskList]:
        """Get the default list, falling back to the oldest list."""
        list_db = (
            self.db.query(ListDB)
            .order_by(ListDB.is_default.desc(), ListDB.created_at)
            .first()
        )
        return list_db.to_pydantic() if list_db else None

    def ensure_default(self) -> TaskList:
        """Create the Inbox list if no list exists yet and return the default list."""
        existing = self.get_default()
        if existing is not None:
            return existing
        try:
            list_db = ListDB(
                name=DEFAULT_LIST_NAME,
                color=DEFAULT_LIST_COLOR,
                icon=DEFAULT_LIST_ICON,
                is_default=True,
            )
            self.db.add(list_db)
            self.db.commit()
            self.db.refresh(list_db)
            logger.info(f"Created default list {list_db.id}")
            return list_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create default list: {type(e).__name__}: {str(e)}")
            raise

    def create(self, data: ListCreate) -> TaskList:
        try:
            list_db = ListDB(name=data.name, color=data.color, icon=data.icon, is_default=False)
            self.db.add(list_db)
            self.db.commit()
            self.db.refresh(list_db)
            logger.debug(f"Created list {list_db.id}: {data.name[:50]}")
            return list_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create list {data.name[:50]}: {type(e).__name__}: {str(e)}")
            raise

    def update(self, list_id: str, changes: ListUpdate) -> TaskList:
        """Apply the provided fields to a list.

        Raises:
            ListNotFoundError: if the list does not exist
            ValueError: if no field was provided
        """
        updates = changes.model_dump(exclude_unset=True, exclude_none=True)
        if not updates:
            raise ValueError("No updates provided")

        list_db = self._get_db(list_id)
        if not list_db:
            raise ListNotFoundError(f"List {list_id} not found")

        for field, value in updates.items():
            setattr(list_db, field, value)
        list_db.updated_at = datetime.utcnow()

        try:
            self.db.commit()
            self.db.refresh(list_db)
            logger.debug(f"Updated list {list_id}")
            return list_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update list {list_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, list_id: str) -> bool:
        """Delete a list and, by cascade, its tasks.

        Raises:
            DefaultListDeletionError: if the list is the default inbox list
        """
        list_db = self._get_db(list_id)
        if not list_db:
            return False
        if list_db.is_default:
            raise DefaultListDeletionError("Cannot delete the default inbox list")

        try:
            self.db.delete(list_db)
            self.db.commit()
            logger.debug(f"Deleted list {list_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete list {list_id}: {type(e).__name__}: {str(e)}")
            raise
