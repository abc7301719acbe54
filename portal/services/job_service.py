# portal/services/job_service.py
import logging
from datetime import datetime
from typing import List

from portal.errors import JobNotFound
from portal.models.job import Job

logger = logging.getLogger(__name__)


class JobService:
    def __init__(self, db, notifications):
        self.db = db
        self.notifications = notifications

    def create_job(self, title: str, description: str, deadline: datetime) -> Job:
        """
        Persist the job, then fan out new_job notifications and emails to
        every agency. Fan-out problems are logged and never undo the job.
        """
        job = Job(title=title, description=description, deadline=deadline)
        self.db.insert_job(job.model_dump(by_alias=True))
        logger.info(f"[Job Creation] Created job {job.id}: {job.title}")

        try:
            self.notifications.notify_job_created(job)
        except Exception:
            logger.exception(f"[Job Creation] Notification fan-out failed for job {job.id}")
        return job

    def get_job(self, job_id: str) -> Job:
        doc = self.db.get_job_by_id(job_id)
        if not doc:
            raise JobNotFound()
        return Job.model_validate(doc)

    def list_jobs(self) -> List[Job]:
        # all jobs, regardless of deadline
        return [Job.model_validate(doc) for doc in self.db.list_jobs()]

    def delete_job(self, job_id: str) -> Job:
        """Remove the job and expire its new_job notifications. Resumes are kept."""
        doc = self.db.delete_job(job_id)
        if not doc:
            raise JobNotFound()
        expired = self.notifications.expire_for_job(job_id)
        logger.info(f"Deleted job {job_id}; {expired} notifications marked expired")
        return Job.model_validate(doc)
