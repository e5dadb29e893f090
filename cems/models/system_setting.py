# cems/models/system_setting.py
from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from cems.db.base_class import Base


class SystemSetting(Base):
    __tablename__ = "system_settings"

    setting_key = Column(String(100), primary_key=True)
    setting_value = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )
