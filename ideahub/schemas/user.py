from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class UserUpdate(BaseModel):
    username: Optional[str] = None
    bio: Optional[str] = None
    wallet_address: Optional[str] = None


class RoleUpdate(BaseModel):
    role: Literal["creator", "investor"]


class UserPublic(BaseModel):
    id: str
    username: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    wallet_address: Optional[str] = None
    role: Optional[str] = None
    is_premium: bool = False
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserOut(UserPublic):
    email: str
