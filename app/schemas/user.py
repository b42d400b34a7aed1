from datetime import datetime
from typing import Optional

from app.db.models import ProfileType
from app.schemas.common import CamelModel


class UserOut(CamelModel):
    id: int
    name: str
    username: str
    gender: Optional[str] = None
    profile_type: ProfileType
    created_at: Optional[datetime] = None


class ProfileSettingsUpdate(CamelModel):
    profile_type: ProfileType
