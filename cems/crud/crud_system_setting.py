# cems/crud/crud_system_setting.py
from typing import Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session

from .base import CRUDBase
from cems.models.system_setting import SystemSetting


class CRUDSystemSetting(CRUDBase[SystemSetting, BaseModel, BaseModel]):
    def get(self, db: Session, id: str) -> Optional[SystemSetting]:
        return db.query(self.model).filter(self.model.setting_key == id).first()

    def get_all(self, db: Session) -> List[SystemSetting]:
        return db.query(self.model).order_by(self.model.setting_key.asc()).all()

    def get_value(self, db: Session, *, key: str) -> Optional[str]:
        row = self.get(db, key)
        return row.setting_value if row else None

    def set_values(self, db: Session, *, values: Dict[str, str]) -> List[SystemSetting]:
        """Updates existing keys only. Callers validate the keys beforehand."""
        rows = (
            db.query(self.model).filter(self.model.setting_key.in_(list(values))).all()
        )
        for row in rows:
            row.setting_value = values[row.setting_key]
            db.add(row)
        db.commit()
        return rows

    def seed_defaults(self, db: Session, *, defaults: Dict[str, tuple]) -> int:
        """Inserts any missing keys with their default value and description."""
        existing = {key for (key,) in db.query(self.model.setting_key).all()}
        created = 0
        for key, (value, description) in defaults.items():
            if key in existing:
                continue
            db.add(self.model(setting_key=key, setting_value=value, description=description))
            created += 1
        if created:
            db.commit()
        return created


system_setting = CRUDSystemSetting(SystemSetting)
