# portal/database/mongodb.py

from pymongo import MongoClient, ReturnDocument
from pymongo.errors import ConnectionFailure, DuplicateKeyError
from typing import Optional, Dict, List
import logging
import re

from portal.config import Config
from portal.errors import DuplicateSubmission
from portal.models.notification import NEW_JOB

logger = logging.getLogger(__name__)


class MongoDB:
    def __init__(self, uri: str = None, database_name: str = None):
        self.uri = uri or Config.MONGODB_URI
        self.database_name = database_name or Config.DATABASE_NAME
        self.client = None
        self.db = None
        self.connect()

    def connect(self):
        """Establish connection to MongoDB"""
        try:
            self.client = MongoClient(self.uri, tz_aware=True)
            self.db = self.client[self.database_name]

            # Test connection
            self.client.admin.command('ping')
            logger.info("Successfully connected to MongoDB")

            self._create_indexes()

        except ConnectionFailure as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    def _create_indexes(self):
        """Create the indexes the duplicate checks and listings rely on"""
        resumes = self.db[Config.RESUMES_COLLECTION]
        # one resume per phone per job, across every worker sharing the database
        resumes.create_index([("candidate_phone", 1), ("job_id", 1)], unique=True)
        resumes.create_index([("job_id", 1)])
        resumes.create_index([("uploaded_by_agency_id", 1)])

        self.db[Config.JOBS_COLLECTION].create_index([("resumes._id", 1)])
        self.db[Config.JOBS_COLLECTION].create_index([("created_at", -1)])

        self.db[Config.NOTIFICATIONS_COLLECTION].create_index([
            ("recipient_user_id", 1),
            ("created_at", -1)
        ])
        self.db[Config.NOTIFICATIONS_COLLECTION].create_index([("type", 1), ("job_id", 1)])

        self.db[Config.USERS_COLLECTION].create_index([("email", 1)], unique=True)
        self.db[Config.USERS_COLLECTION].create_index([("role", 1)])

    @property
    def jobs(self):
        return self.db[Config.JOBS_COLLECTION]

    @property
    def resumes(self):
        return self.db[Config.RESUMES_COLLECTION]

    @property
    def notifications(self):
        return self.db[Config.NOTIFICATIONS_COLLECTION]

    @property
    def users(self):
        return self.db[Config.USERS_COLLECTION]

    # users
    def insert_user(self, user_doc: Dict) -> str:
        self.users.insert_one(user_doc)
        return user_doc["_id"]

    def get_user_by_id(self, user_id: str) -> Optional[Dict]:
        return self.users.find_one({"_id": user_id})

    def get_user_by_email(self, email: str) -> Optional[Dict]:
        return self.users.find_one({"email": email})

    def find_agency_by_name(self, name: str) -> Optional[Dict]:
        pattern = re.compile("^" + re.escape(name) + "$", re.IGNORECASE)
        return self.users.find_one({"name": pattern, "role": "agency"})

    def get_users_by_role(self, role: str) -> List[Dict]:
        return list(self.users.find({"role": role}))

    def list_users(self) -> List[Dict]:
        return list(self.users.find({}))

    # jobs
    def insert_job(self, job_doc: Dict) -> str:
        self.jobs.insert_one(job_doc)
        return job_doc["_id"]

    def get_job_by_id(self, job_id: str) -> Optional[Dict]:
        return self.jobs.find_one({"_id": job_id})

    def list_jobs(self) -> List[Dict]:
        return list(self.jobs.find({}).sort("created_at", -1))

    def delete_job(self, job_id: str) -> Optional[Dict]:
        return self.jobs.find_one_and_delete({"_id": job_id})

    def push_embedded_resume(self, job_id: str, snapshot: Dict) -> bool:
        result = self.jobs.update_one({"_id": job_id}, {"$push": {"resumes": snapshot}})
        return result.matched_count == 1

    def update_embedded_resume_status(self, job_id: str, resume_id: str, status: str) -> bool:
        result = self.jobs.update_one(
            {"_id": job_id, "resumes._id": resume_id},
            {"$set": {"resumes.$.status": status}}
        )
        return result.matched_count == 1

    def replace_embedded_resume(self, job_id: str, snapshot: Dict) -> bool:
        result = self.jobs.update_one(
            {"_id": job_id, "resumes._id": snapshot["_id"]},
            {"$set": {"resumes.$": snapshot}}
        )
        if result.matched_count:
            return True
        return self.push_embedded_resume(job_id, snapshot)

    def embedded_phone_exists(self, job_id: str, phone: str) -> bool:
        return self.jobs.count_documents(
            {"_id": job_id, "resumes.candidate_phone": phone}, limit=1
        ) > 0

    # resumes
    def insert_resume(self, resume_doc: Dict) -> str:
        try:
            self.resumes.insert_one(resume_doc)
        except DuplicateKeyError:
            logger.warning(
                f"Duplicate resume rejected by index: phone {resume_doc.get('candidate_phone')} "
                f"already stored for job {resume_doc.get('job_id')}"
            )
            raise DuplicateSubmission()
        return resume_doc["_id"]

    def delete_resume(self, resume_id: str) -> bool:
        return self.resumes.delete_one({"_id": resume_id}).deleted_count == 1

    def get_resume_by_id(self, resume_id: str) -> Optional[Dict]:
        return self.resumes.find_one({"_id": resume_id})

    def find_resume_by_phone(self, phone: str, job_id: str) -> Optional[Dict]:
        return self.resumes.find_one({"candidate_phone": phone, "job_id": job_id})

    def get_resumes_by_job(self, job_id: Optional[str] = None) -> List[Dict]:
        query = {"job_id": job_id} if job_id else {}
        return list(self.resumes.find(query).sort("created_at", 1))

    def get_resumes_by_agency(self, agency_id: str) -> List[Dict]:
        return list(self.resumes.find({"uploaded_by_agency_id": agency_id}).sort("created_at", -1))

    def update_resume_status(self, resume_id: str, expected_status: str, new_status: str) -> Optional[Dict]:
        """Compare-and-set: only applies while the stored status is still expected_status"""
        return self.resumes.find_one_and_update(
            {"_id": resume_id, "status": expected_status},
            {"$set": {"status": new_status}},
            return_document=ReturnDocument.AFTER
        )

    # notifications
    def insert_notification(self, notification_doc: Dict) -> str:
        self.notifications.insert_one(notification_doc)
        return notification_doc["_id"]

    def get_notifications_for_user(self, user_id: str) -> List[Dict]:
        return list(self.notifications.find({"recipient_user_id": user_id}).sort("created_at", -1))

    def mark_notifications_read(self, user_id: str) -> int:
        result = self.notifications.update_many(
            {"recipient_user_id": user_id, "read": False},
            {"$set": {"read": True}}
        )
        return result.modified_count

    def get_notified_job_ids(self) -> List[str]:
        """Job ids referenced by new_job notifications that are not expired yet"""
        return self.notifications.distinct(
            "job_id", {"type": NEW_JOB, "expired": False, "job_id": {"$ne": None}}
        )

    def expire_job_notifications(self, job_ids: List[str]) -> int:
        if not job_ids:
            return 0
        result = self.notifications.update_many(
            {"type": NEW_JOB, "job_id": {"$in": list(job_ids)}},
            {"$set": {"expired": True}}
        )
        return result.modified_count
