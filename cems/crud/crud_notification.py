# cems/crud/crud_notification.py
from typing import List, Optional, Tuple

from pydantic import BaseModel
from sqlalchemy.orm import Session

from .base import CRUDBase
from cems.models.notification import Notification


class CRUDNotification(CRUDBase[Notification, BaseModel, BaseModel]):
    def add_many(
        self, db: Session, *, user_ids: List[str], title: str, message: str, type: str
    ) -> List[Notification]:
        """Stages one row per user in the caller's transaction."""
        rows = [
            self.model(user_id=user_id, title=title, message=message, type=type)
            for user_id in user_ids
        ]
        db.add_all(rows)
        return rows

    def get_for_user(
        self, db: Session, *, id: str, user_id: str
    ) -> Optional[Notification]:
        return (
            db.query(self.model)
            .filter(self.model.id == id, self.model.user_id == user_id)
            .first()
        )

    def get_multi_by_user(
        self,
        db: Session,
        *,
        user_id: str,
        skip: int = 0,
        limit: int = 20,
        unread_only: bool = False,
    ) -> Tuple[List[Notification], int]:
        query = db.query(self.model).filter(self.model.user_id == user_id)
        if unread_only:
            query = query.filter(self.model.is_read == False)  # noqa: E712
        total = query.count()
        items = (
            query.order_by(self.model.created_at.desc()).offset(skip).limit(limit).all()
        )
        return items, total

    def count_unread(self, db: Session, *, user_id: str) -> int:
        return (
            db.query(self.model)
            .filter(self.model.user_id == user_id, self.model.is_read == False)  # noqa: E712
            .count()
        )

    def mark_all_read(self, db: Session, *, user_id: str) -> int:
        updated = (
            db.query(self.model)
            .filter(self.model.user_id == user_id, self.model.is_read == False)  # noqa: E712
            .update({self.model.is_read: True}, synchronize_session=False)
        )
        db.commit()
        return updated

    def remove_all_for_user(self, db: Session, *, user_id: str) -> int:
        deleted = (
            db.query(self.model)
            .filter(self.model.user_id == user_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted


notification = CRUDNotification(Notification)
