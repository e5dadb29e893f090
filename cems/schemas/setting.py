from typing import Dict, Optional, Union

from pydantic import BaseModel, Field


class SettingValue(BaseModel):
    value: str
    description: Optional[str] = None


class SettingsUpdate(BaseModel):
    # Values arrive as JSON scalars and are stored as strings
    settings: Dict[str, Union[bool, int, str]] = Field(..., min_length=1)


class SettingsResponse(BaseModel):
    success: bool = True
    settings: Dict[str, SettingValue]
