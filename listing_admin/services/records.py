from __future__ import annotations
import logging
from typing import Any, Dict, List, Literal, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from listing_admin.core.exceptions import RecordStoreError
from listing_admin.models.property import Property

logger = logging.getLogger(__name__)

# sqlite3 raises OverflowError itself, outside the SQLAlchemy hierarchy
STORE_ERRORS = (SQLAlchemyError, OverflowError)


class PropertyStore:
    """The ``properties`` table behind a small get/list/insert/update/delete API."""

    def __init__(self, db: Session, order: Literal["asc", "desc"] = "desc"):
        self.db = db
        self.order = order

    def _fail(self, action: str, exc: Exception) -> RecordStoreError:
        self.db.rollback()
        logger.error("Record store %s failed: %s", action, exc)
        return RecordStoreError(f"Could not {action} property: {exc.__class__.__name__}")

    def get(self, prop_id: int) -> Optional[Property]:
        try:
            return self.db.get(Property, prop_id)
        except STORE_ERRORS as e:
            raise self._fail("load", e) from e

    def list(self) -> List[Property]:
        col = Property.id.desc() if self.order == "desc" else Property.id.asc()
        try:
            return list(self.db.scalars(select(Property).order_by(col)))
        except STORE_ERRORS as e:
            raise self._fail("list", e) from e

    def insert(self, fields: Dict[str, Any]) -> Property:
        prop = Property(**fields)
        try:
            self.db.add(prop)
            self.db.commit()
            self.db.refresh(prop)
        except STORE_ERRORS as e:
            raise self._fail("insert", e) from e
        return prop

    def update(self, prop_id: int, fields: Dict[str, Any]) -> Optional[Property]:
        try:
            prop = self.db.get(Property, prop_id)
            if prop is None:
                return None
            for key, value in fields.items():
                setattr(prop, key, value)
            self.db.commit()
            self.db.refresh(prop)
        except STORE_ERRORS as e:
            raise self._fail("update", e) from e
        return prop

    def delete(self, prop_id: int) -> bool:
        try:
            prop = self.db.get(Property, prop_id)
            if prop is None:
                return False
            self.db.delete(prop)
            self.db.commit()
        except STORE_ERRORS as e:
            raise self._fail("delete", e) from e
        return True
