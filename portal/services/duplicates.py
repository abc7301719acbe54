import logging

from portal.errors import DuplicateSubmission

logger = logging.getLogger(__name__)


class DuplicateDetector:
    """
    Same phone, same job is a duplicate; the same phone on another job is not.

    Both the canonical resumes collection and the snapshots embedded in the
    job are checked, whichever way the phone number was obtained.
    """

    def __init__(self, db):
        self.db = db

    def phone_in_resumes(self, phone: str, job_id: str) -> bool:
        return self.db.find_resume_by_phone(phone, job_id) is not None

    def phone_in_job(self, phone: str, job_id: str) -> bool:
        return self.db.embedded_phone_exists(job_id, phone)

    def ensure_unique(self, phone: str, job_id: str):
        if self.phone_in_resumes(phone, job_id) or self.phone_in_job(phone, job_id):
            logger.warning(f"Duplicate resume rejected: phone {phone} already submitted for job {job_id}")
            raise DuplicateSubmission()
