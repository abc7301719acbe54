# portal/models/notification.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime

from portal.utils import ensure_utc, new_id, utcnow

NEW_JOB = "new_job"
RESUME_STATUS = "resume_status"


class Notification(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_id, alias="_id")
    recipient_user_id: str
    message: str
    type: str = Field(pattern="^(new_job|resume_status)$")
    read: bool = False

    # Only set for new_job notifications
    job_id: Optional[str] = None
    job_deadline: Optional[datetime] = None

    expired: bool = False
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("job_deadline", "created_at")
    @classmethod
    def normalize_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)
