# portal/services/notification_service.py
import re
import html
import logging
from datetime import datetime
from typing import List, Optional

from portal.models.job import Job
from portal.models.notification import NEW_JOB, RESUME_STATUS, Notification
from portal.models.resume import Resume
from portal.models.user import AGENCY, User
from portal.utils import utcnow

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r'(https?://[^\s<]+)')


def format_deadline(deadline: datetime) -> str:
    return deadline.strftime("%d %b %Y, %I:%M %p UTC")


def linkify(text: str) -> str:
    """Escape text for HTML and turn bare URLs into links."""
    return URL_PATTERN.sub(
        r'<a href="\1" style="color:#1976d2;text-decoration:underline;" target="_blank">\1</a>',
        html.escape(text)
    ).replace("\n", "<br>")


class NotificationService:
    """
    In-app notifications plus best-effort email for the two triggers:
    a job being posted and a resume changing status.

    Nothing here raises into the caller once the triggering write has
    succeeded; failures are logged per recipient.
    """

    def __init__(self, db, dispatcher):
        self.db = db
        self.dispatcher = dispatcher

    def _create(self, notification: Notification) -> bool:
        try:
            self.db.insert_notification(notification.model_dump(by_alias=True))
            return True
        except Exception as e:
            logger.error(f"[Notification] Error creating notification for {notification.recipient_user_id}: {e}")
            return False

    def _email(self, to: Optional[str], subject: str, body: str):
        if not to:
            return
        try:
            self.dispatcher.submit(to, subject, body)
        except Exception as e:
            logger.error(f"[Email] Could not queue email to {to}: {e}")

    def notify_job_created(self, job: Job) -> int:
        """One new_job notification and one email per agency. Returns notifications stored."""
        try:
            agencies = [User.model_validate(u) for u in self.db.get_users_by_role(AGENCY)]
        except Exception as e:
            logger.error(f"[Job Creation] Could not load agencies for job {job.id}: {e}")
            return 0

        logger.info(f"[Job Creation] Notifying {len(agencies)} agencies about job {job.id}")
        subject = f"New Job Posted: {job.title}"
        body = (
            "<h2>A new job has been posted</h2>"
            f"<p><b>Title:</b> {html.escape(job.title)}</p>"
            f"<p><b>Description:</b><br>{linkify(job.description)}</p>"
            f"<p><b>Applicable till:</b> {format_deadline(job.deadline)}</p>"
        )

        created = 0
        for agency in agencies:
            notification = Notification(
                recipient_user_id=agency.id,
                message=f"A new job has been posted: {job.title}",
                type=NEW_JOB,
                job_id=job.id,
                job_deadline=job.deadline,
            )
            if self._create(notification):
                created += 1
                logger.info(f"[Notification] Created for agency: {agency.email} {agency.id}")
            self._email(agency.email, subject, body)
        return created

    def notify_status_changed(self, resume: Resume, job_title: str) -> bool:
        """Tell the submitting agency (never the candidate) about the new status."""
        status = resume.status
        phone = resume.candidate_phone or "-"
        file_name = resume.file_name
        message = (
            f"A resume you submitted (Phone: {phone}{', File: ' + file_name if file_name else ''}) "
            f"has been {status} for job: {job_title}."
        )
        created = self._create(Notification(
            recipient_user_id=resume.uploaded_by_agency_id,
            message=message,
            type=RESUME_STATUS,
        ))

        agency_email = resume.uploaded_by_agency_email
        try:
            agency = self.db.get_user_by_id(resume.uploaded_by_agency_id)
            if agency and agency.get("email"):
                agency_email = agency["email"]
        except Exception as e:
            logger.error(f"Could not load agency {resume.uploaded_by_agency_id}: {e}")

        subject = f"Resume {status.capitalize()} for Job: {job_title}"
        body = (
            "<h2>Resume Status Update</h2>"
            f"<p>Your submitted resume has been <b>{status}</b> for the job: <b>{html.escape(job_title)}</b>.</p>"
            "<ul>"
            f"<li><b>Phone:</b> {html.escape(phone)}</li>"
            f"<li><b>File:</b> {html.escape(file_name)}</li>"
            "</ul>"
        )
        self._email(agency_email, subject, body)
        return created

    def list_notifications(self, user_id: str) -> List[Notification]:
        return [Notification.model_validate(n) for n in self.db.get_notifications_for_user(user_id)]

    def mark_all_read(self, user_id: str) -> int:
        return self.db.mark_notifications_read(user_id)

    def expire_for_job(self, job_id: str) -> int:
        return self.db.expire_job_notifications([job_id])

    def mark_expired_notifications(self, now: Optional[datetime] = None) -> int:
        """Expire new_job notifications whose job is gone or past its deadline."""
        now = now or utcnow()
        to_expire = []
        for job_id in self.db.get_notified_job_ids():
            doc = self.db.get_job_by_id(job_id)
            if doc is None or Job.model_validate(doc).is_expired(now):
                to_expire.append(job_id)
        count = self.db.expire_job_notifications(to_expire)
        logger.info(f"Marked {count} notifications as expired.")
        return count
