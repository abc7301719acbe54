# portal/models/resume.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime

from portal.utils import ensure_utc, new_id, utcnow

PENDING = "pending"
SHORTLISTED = "shortlisted"
REJECTED = "rejected"
RESUME_STATUSES = (PENDING, SHORTLISTED, REJECTED)
STATUS_PATTERN = "^(pending|shortlisted|rejected)$"


class Resume(BaseModel):
    """Canonical resume record; its id is shared with the snapshot embedded in the job."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_id, alias="_id")
    candidate_name: Optional[str] = None
    candidate_email: Optional[str] = None
    candidate_phone: str
    file_url: str
    job_id: str
    status: str = Field(default=PENDING, pattern=STATUS_PATTERN)

    # Submitting agency as it was at submission time
    uploaded_by_agency_id: str
    uploaded_by_agency_name: Optional[str] = None
    uploaded_by_agency_email: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("created_at")
    @classmethod
    def normalize_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @property
    def file_name(self) -> str:
        return self.file_url.rsplit("/", 1)[-1] if self.file_url else ""


class StatusChange(BaseModel):
    status: str = Field(pattern=STATUS_PATTERN)
