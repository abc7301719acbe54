# portal/services/resume_service.py
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import List, Optional

from portal.errors import (
    AgencyNotFound,
    InvalidFileType,
    JobNotFound,
    ResumeNotFound,
)
from portal.models.job import EmbeddedResume, Job
from portal.models.resume import Resume
from portal.models.user import User
from portal.services import status_machine
from portal.services.duplicates import DuplicateDetector
from portal.services.parser import DocumentParser

logger = logging.getLogger(__name__)

DELETED_JOB_TITLE = "(deleted job)"


class KeyedLocks:
    """One lock per key, dropped again once nobody holds or waits on it."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = {}

    @contextmanager
    def hold(self, key: str):
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]


@dataclass
class Inconsistency:
    job_id: str
    resume_id: str
    kind: str  # missing_snapshot | missing_canonical | mismatch
    detail: str = ""


class ResumeService:
    """
    Owns both views of a resume: the canonical record in the resumes
    collection and the snapshot embedded in its job. The canonical record is
    the source of truth; the snapshot is written right after it and can be
    rebuilt with reconcile().
    """

    def __init__(self, db, blob_store, notifications, parser: DocumentParser = None):
        self.db = db
        self.blobs = blob_store
        self.notifications = notifications
        self.parser = parser or DocumentParser()
        self.duplicates = DuplicateDetector(db)
        self._job_locks = KeyedLocks()
        self._resume_locks = KeyedLocks()

    def _load_job(self, job_id: str) -> Job:
        doc = self.db.get_job_by_id(job_id)
        if not doc:
            raise JobNotFound()
        return Job.model_validate(doc)

    def resolve_agency(self, identifier: Optional[str]) -> User:
        """Match the submitter by email first, then by agency name (case-insensitive)."""
        identifier = (identifier or "").strip()
        if not identifier:
            raise AgencyNotFound("No agency provided in request.")
        doc = (
            self.db.get_user_by_email(identifier)
            or self.db.get_user_by_email(identifier.lower())
            or self.db.find_agency_by_name(identifier)
        )
        if not doc:
            logger.error(f"Agency not found for email or name: {identifier}")
            raise AgencyNotFound()
        return User.model_validate(doc)

    def submit_resume(
        self,
        job_id: str,
        agency: str,
        pdf_bytes: bytes,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
        candidate_name: Optional[str] = None,
        candidate_email: Optional[str] = None,
        candidate_phone: Optional[str] = None,
    ) -> Resume:
        job = self._load_job(job_id)
        if not self.parser.is_pdf(pdf_bytes, filename, content_type):
            raise InvalidFileType()
        agency_user = self.resolve_agency(agency)

        file_url = self.blobs.save(pdf_bytes, filename or "resume.pdf")
        try:
            phone = (candidate_phone or "").strip() or self.parser.extract_phone(pdf_bytes)
            with self._job_locks.hold(job.id):
                self.duplicates.ensure_unique(phone, job.id)
                resume = Resume(
                    candidate_name=candidate_name,
                    candidate_email=candidate_email,
                    candidate_phone=phone,
                    file_url=file_url,
                    job_id=job.id,
                    uploaded_by_agency_id=agency_user.id,
                    uploaded_by_agency_name=agency_user.name,
                    uploaded_by_agency_email=agency_user.email,
                )
                self._persist(resume)
        except Exception:
            self.blobs.delete(file_url)
            raise

        logger.info(f"Resume {resume.id} submitted for job {job.id} by {agency_user.email}")
        return resume

    def _persist(self, resume: Resume):
        """Canonical insert then embedded push; undo the insert if the push does not land."""
        self.db.insert_resume(resume.model_dump(by_alias=True))
        snapshot = EmbeddedResume.from_resume(resume).model_dump(by_alias=True)
        try:
            pushed = self.db.push_embedded_resume(resume.job_id, snapshot)
        except Exception:
            self.db.delete_resume(resume.id)
            raise
        if not pushed:
            self.db.delete_resume(resume.id)
            raise JobNotFound()

    def get_resume(self, resume_id: str) -> Resume:
        doc = self.db.get_resume_by_id(resume_id)
        if not doc:
            raise ResumeNotFound()
        return Resume.model_validate(doc)

    def change_status(self, resume_id: str, new_status: str, actor_role: str, actor_id: Optional[str] = None) -> Resume:
        logger.info(f"[change_status] resume={resume_id} status={new_status} actor={actor_id} ({actor_role})")
        with self._resume_locks.hold(resume_id):
            resume = self.get_resume(resume_id)
            job_doc = self.db.get_job_by_id(resume.job_id)
            job = Job.model_validate(job_doc) if job_doc else None
            # a deleted job counts as expired for agencies
            job_expired = job is None or job.is_expired()

            outcome = status_machine.check(resume.status, new_status, actor_role, job_expired)
            if outcome == status_machine.NOOP:
                return resume

            updated = self.db.update_resume_status(resume.id, resume.status, new_status)
            if updated is None:
                # another writer moved it first; judge the request against what is stored now
                fresh = self.get_resume(resume_id)
                status_machine.check(fresh.status, new_status, actor_role, job_expired)
                return fresh
            resume = Resume.model_validate(updated)

            if job is None:
                logger.error(f"Consistency fault: job {resume.job_id} for resume {resume.id} not found")
            elif not self.db.update_embedded_resume_status(job.id, resume.id, new_status):
                logger.error(f"Consistency fault: embedded resume {resume.id} not found in job {job.id}")

        try:
            self.notifications.notify_status_changed(resume, job.title if job else DELETED_JOB_TITLE)
        except Exception:
            logger.exception(f"Status notification failed for resume {resume.id}")
        return resume

    def list_resumes_for_job(self, job_id: str) -> List[Resume]:
        return [Resume.model_validate(doc) for doc in self.db.get_resumes_by_job(job_id)]

    def list_job_snapshots(self, job_id: str) -> List[EmbeddedResume]:
        return self._load_job(job_id).resumes

    def list_resumes_for_agency(self, agency_id: str) -> List[Resume]:
        return [Resume.model_validate(doc) for doc in self.db.get_resumes_by_agency(agency_id)]

    def find_inconsistencies(self, job_id: Optional[str] = None) -> List[Inconsistency]:
        jobs = [self._load_job(job_id)] if job_id else [Job.model_validate(d) for d in self.db.list_jobs()]
        found = []
        for job in jobs:
            canonical = {r.id: r for r in self.list_resumes_for_job(job.id)}
            embedded = {r.id: r for r in job.resumes}
            for rid, resume in canonical.items():
                snapshot = embedded.get(rid)
                if snapshot is None:
                    found.append(Inconsistency(job.id, rid, "missing_snapshot"))
                elif snapshot.status != resume.status or snapshot.file_url != resume.file_url:
                    found.append(Inconsistency(
                        job.id, rid, "mismatch",
                        f"status {snapshot.status}/{resume.status}, file {snapshot.file_url}/{resume.file_url}"
                    ))
            for rid in embedded:
                if rid not in canonical:
                    found.append(Inconsistency(job.id, rid, "missing_canonical"))
        return found

    def reconcile(self, job_id: Optional[str] = None) -> int:
        """Rewrite embedded snapshots from their canonical records. Returns snapshots repaired."""
        repaired = 0
        for issue in self.find_inconsistencies(job_id):
            if issue.kind == "missing_canonical":
                logger.error(f"Embedded resume {issue.resume_id} in job {issue.job_id} has no canonical record")
                continue
            with self._resume_locks.hold(issue.resume_id):
                resume = self.get_resume(issue.resume_id)
                snapshot = EmbeddedResume.from_resume(resume).model_dump(by_alias=True)
                if self.db.replace_embedded_resume(issue.job_id, snapshot):
                    repaired += 1
                    logger.warning(f"Repaired embedded resume {issue.resume_id} in job {issue.job_id} ({issue.kind})")
        return repaired
