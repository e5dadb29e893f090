# cems/services/settings_provider.py
"""
Typed access to the admin-editable system settings.

Workflow guards read settings through this provider instead of querying
the table directly, so tests can substitute fixed values.
"""

import logging
from typing import Dict, Optional

from sqlalchemy.orm import Session

from cems.constants.settings_keys import DEFAULT_SETTINGS
from cems.crud import crud_system_setting

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class SettingsProvider:
    def get(self, db: Session, key: str) -> Optional[str]:
        value = crud_system_setting.system_setting.get_value(db, key=key)
        if value is None and key in DEFAULT_SETTINGS:
            return DEFAULT_SETTINGS[key][0]
        return value

    def get_int(self, db: Session, key: str, default: int = 0) -> int:
        raw = self.get(db, key)
        try:
            return int(raw) if raw is not None else default
        except ValueError:
            logger.warning(f"System setting {key}={raw!r} is not an integer; using {default}")
            return default

    def get_bool(self, db: Session, key: str, default: bool = False) -> bool:
        raw = self.get(db, key)
        if raw is None:
            return default
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        logger.warning(f"System setting {key}={raw!r} is not a boolean; using {default}")
        return default


class StaticSettingsProvider(SettingsProvider):
    """Fixed values, falling back to the defaults table. Used by tests and scripts."""

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self.values = values or {}

    def get(self, db: Session, key: str) -> Optional[str]:
        if key in self.values:
            return self.values[key]
        default = DEFAULT_SETTINGS.get(key)
        return default[0] if default else None


def seed_default_settings(db: Session) -> int:
    created = crud_system_setting.system_setting.seed_defaults(db, defaults=DEFAULT_SETTINGS)
    if created:
        logger.info(f"Seeded {created} default system settings")
    return created


def normalize_setting_value(value) -> str:
    """Settings are stored as strings; booleans use 'true'/'false'."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value).strip()


settings_provider = SettingsProvider()
