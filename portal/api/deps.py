# portal/api/deps.py
import logging
import threading
from typing import Optional

from fastapi import Depends, Header, HTTPException

from portal.database import get_database
from portal.models.user import User
from portal.services.blob_store import LocalBlobStore
from portal.services.job_service import JobService
from portal.services.mailer import EmailDispatcher
from portal.services.notification_service import NotificationService
from portal.services.parser import DocumentParser
from portal.services.resume_service import ResumeService
from portal.services.user_service import UserService

logger = logging.getLogger(__name__)


class Services:
    def __init__(self, db=None, blob_store=None, dispatcher=None, parser: DocumentParser = None):
        self.db = db if db is not None else get_database()
        self.blobs = blob_store or LocalBlobStore()
        self.dispatcher = dispatcher or EmailDispatcher()
        self.notifications = NotificationService(self.db, self.dispatcher)
        self.jobs = JobService(self.db, self.notifications)
        self.resumes = ResumeService(self.db, self.blobs, self.notifications, parser)
        self.users = UserService(self.db)

    def close(self):
        self.dispatcher.shutdown()


_services: Optional[Services] = None
_services_lock = threading.Lock()


def get_services() -> Services:
    global _services
    if _services is None:
        # sync dependencies run on a threadpool; build the container once
        with _services_lock:
            if _services is None:
                _services = Services()
    return _services


def shutdown_services():
    global _services
    with _services_lock:
        services, _services = _services, None
    if services is not None:
        services.close()


def get_current_user(
    x_user_id: Optional[str] = Header(None),
    services: Services = Depends(get_services),
) -> User:
    # token issuance lives outside this service; callers arrive with a resolved user id
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    user = services.users.get_user(x_user_id)
    if not user or user.status != "active":
        raise HTTPException(status_code=401, detail="Unknown or inactive user")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
