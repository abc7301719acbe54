# portal/models/user.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from portal.utils import new_id, utcnow

ADMIN = "admin"
AGENCY = "agency"


class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_id, alias="_id")
    name: str
    email: str
    role: str = Field(pattern="^(admin|agency)$")
    status: str = Field(default="active", pattern="^(active|inactive)$")
    created_at: Optional[datetime] = Field(default_factory=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN


class UserCreate(BaseModel):
    name: str
    email: str
    role: str = Field(default=AGENCY, pattern="^(admin|agency)$")
