# cems/schemas/token.py
from pydantic import BaseModel

from cems.constants.status import UserRole


class TokenPayload(BaseModel):
    sub: str  # "sub" is the standard claim for subject (user ID)
    role: UserRole
    exp: int  # Standard claim for expiration time

    model_config = {"from_attributes": True}
