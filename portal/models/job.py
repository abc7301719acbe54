# portal/models/job.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from datetime import datetime

from portal.models.resume import PENDING, STATUS_PATTERN, Resume
from portal.utils import ensure_utc, new_id, utcnow


class EmbeddedResume(BaseModel):
    """Read-optimized copy of a Resume kept inside its job."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    file_url: str
    uploaded_by: str
    uploaded_by_name: Optional[str] = None
    uploaded_by_email: Optional[str] = None
    status: str = Field(default=PENDING, pattern=STATUS_PATTERN)
    uploaded_at: datetime = Field(default_factory=utcnow)
    candidate_name: Optional[str] = None
    candidate_email: Optional[str] = None
    candidate_phone: Optional[str] = None

    @field_validator("uploaded_at")
    @classmethod
    def normalize_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @classmethod
    def from_resume(cls, resume: Resume) -> "EmbeddedResume":
        return cls(
            id=resume.id,
            file_url=resume.file_url,
            uploaded_by=resume.uploaded_by_agency_id,
            uploaded_by_name=resume.uploaded_by_agency_name,
            uploaded_by_email=resume.uploaded_by_agency_email,
            status=resume.status,
            uploaded_at=resume.created_at,
            candidate_name=resume.candidate_name,
            candidate_email=resume.candidate_email,
            candidate_phone=resume.candidate_phone,
        )


class Job(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_id, alias="_id")
    title: str
    description: str
    deadline: datetime
    status: str = Field(default="open", pattern="^(open|closed)$")
    created_at: datetime = Field(default_factory=utcnow)

    # Submission order
    resumes: List[EmbeddedResume] = []

    @field_validator("deadline", "created_at")
    @classmethod
    def normalize_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.deadline < (now or utcnow())

    def snapshot(self, resume_id: str) -> Optional[EmbeddedResume]:
        for embedded in self.resumes:
            if embedded.id == resume_id:
                return embedded
        return None


class JobCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    deadline: datetime
