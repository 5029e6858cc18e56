"""Repository for Label database operations."""

import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from taskplanner.database.models import LabelDB
from taskplanner.models.catalog import Label, LabelCreate, LabelUpdate

logger = logging.getLogger(__name__)


class LabelNotFoundError(ValueError):
    """Raised when a label ID does not exist."""


class LabelRepository:
    """Repository for Label database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _get_db(self, label_id: str) -> Optional[LabelDB]:
        return self.db.query(LabelDB).filter(LabelDB.id == label_id).first()

    def get_all(self) -> List[Label]:
        """Get all labels sorted by creation date (oldest first)."""
        labels_db = self.db.query(LabelDB).order_by(LabelDB.created_at, LabelDB.name).all()
        return [label_db.to_pydantic() for label_db in labels_db]

    def get(self, label_id: str) -> Optional[Label]:
        label_db = self._get_db(label_id)
        return label_db.to_pydantic() if label_db else None

    def get_by_name(self, name: str) -> Optional[Label]:
        """Case-insensitive lookup by name (oldest label wins on duplicates)."""
        label_db = (
            self.db.query(LabelDB)
            .filter(func.lower(LabelDB.name) == name.lower())
            .order_by(LabelDB.created_at)
            .first()
        )
        return label_db.to_pydantic() if label_db else None

    def create(self, data: LabelCreate) -> Label:
        try:
            label_db = LabelDB(name=data.name, color=data.color, icon=data.icon)
            self.db.add(label_db)
            self.db.commit()
            self.db.refresh(label_db)
            logger.debug(f"Created label {label_db.id}: {data.name[:50]}")
            return label_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create label {data.name[:50]}: {type(e).__name__}: {str(e)}")
            raise

    def update(self, label_id: str, changes: LabelUpdate) -> Label:
        updates = changes.model_dump(exclude_unset=True, exclude_none=True)
        if not updates:
            raise ValueError("No updates provided")

        label_db = self._get_db(label_id)
        if not label_db:
            raise LabelNotFoundError(f"Label {label_id} not found")

        for field, value in updates.items():
            setattr(label_db, field, value)
        label_db.updated_at = datetime.utcnow()

        try:
            self.db.commit()
            self.db.refresh(label_db)
            logger.debug(f"Updated label {label_id}")
            return label_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update label {label_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, label_id: str) -> bool:
        label_db = self._get_db(label_id)
        if not label_db:
            return False

        try:
            self.db.delete(label_db)
            self.db.commit()
            logger.debug(f"Deleted label {label_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete label {label_id}: {type(e).__name__}: {str(e)}")
            raise
