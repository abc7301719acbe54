# portal/database/local_storage.py
import os
import json
import threading
import logging
from datetime import datetime
from typing import Optional, List, Dict

from portal.config import Config
from portal.errors import DuplicateSubmission
from portal.models.notification import NEW_JOB

logger = logging.getLogger(__name__)

# stores opened on the same directory share one lock
_dir_locks: Dict[str, threading.RLock] = {}
_dir_locks_guard = threading.Lock()


def _lock_for(data_dir: str) -> threading.RLock:
    key = os.path.realpath(data_dir)
    with _dir_locks_guard:
        if key not in _dir_locks:
            _dir_locks[key] = threading.RLock()
        return _dir_locks[key]


def _encode(value):
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


# Simple JSON file-backed storage (fallback so the portal runs without MongoDB)
class LocalStorage:
    def __init__(self, data_dir: str = None):
        data_dir = data_dir or Config.DATA_DIR
        os.makedirs(data_dir, exist_ok=True)
        self.data_dir = data_dir
        self.jobs_path = os.path.join(data_dir, "jobs.json")
        self.resumes_path = os.path.join(data_dir, "resumes.json")
        self.notifications_path = os.path.join(data_dir, "notifications.json")
        self.users_path = os.path.join(data_dir, "users.json")
        # one lock for every file; read-modify-write cycles must not interleave
        self._lock = _lock_for(data_dir)
        self._ensure_files()

    def _ensure_files(self):
        for p in [self.jobs_path, self.resumes_path, self.notifications_path, self.users_path]:
            if not os.path.exists(p):
                with open(p, 'w', encoding='utf-8') as f:
                    json.dump([], f)

    def _load(self, path) -> List[Dict]:
        with self._lock:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)

    def _save(self, path, data):
        with self._lock:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=2, default=_encode)

    def _roundtrip(self, doc: Dict) -> Dict:
        # store exactly what a later _load would return
        return json.loads(json.dumps(doc, default=_encode))

    def _insert(self, path, doc: Dict) -> str:
        with self._lock:
            data = self._load(path)
            if any(d.get('_id') == doc['_id'] for d in data):
                raise ValueError(f"Duplicate key {doc['_id']}")
            data.append(self._roundtrip(doc))
            self._save(path, data)
        return doc['_id']

    def _find_one(self, path, predicate) -> Optional[Dict]:
        for doc in self._load(path):
            if predicate(doc):
                return doc
        return None

    # users
    def insert_user(self, user_doc: Dict) -> str:
        with self._lock:
            email = (user_doc.get('email') or '').lower()
            if self._find_one(self.users_path, lambda u: (u.get('email') or '').lower() == email):
                raise ValueError(f"User with email {user_doc.get('email')} already exists")
            return self._insert(self.users_path, user_doc)

    def get_user_by_id(self, user_id: str) -> Optional[Dict]:
        return self._find_one(self.users_path, lambda u: u.get('_id') == user_id)

    def get_user_by_email(self, email: str) -> Optional[Dict]:
        return self._find_one(self.users_path, lambda u: u.get('email') == email)

    def find_agency_by_name(self, name: str) -> Optional[Dict]:
        name = name.lower()
        return self._find_one(
            self.users_path,
            lambda u: u.get('role') == 'agency' and (u.get('name') or '').lower() == name
        )

    def get_users_by_role(self, role: str) -> List[Dict]:
        return [u for u in self._load(self.users_path) if u.get('role') == role]

    def list_users(self) -> List[Dict]:
        return self._load(self.users_path)

    # jobs
    def insert_job(self, job_doc: Dict) -> str:
        return self._insert(self.jobs_path, job_doc)

    def get_job_by_id(self, job_id: str) -> Optional[Dict]:
        return self._find_one(self.jobs_path, lambda j: j.get('_id') == job_id)

    def list_jobs(self) -> List[Dict]:
        return sorted(self._load(self.jobs_path), key=lambda j: j.get('created_at') or '', reverse=True)

    def delete_job(self, job_id: str) -> Optional[Dict]:
        with self._lock:
            data = self._load(self.jobs_path)
            for i, job in enumerate(data):
                if job.get('_id') == job_id:
                    del data[i]
                    self._save(self.jobs_path, data)
                    return job
        return None

    def _update_job(self, job_id: str, mutate) -> bool:
        with self._lock:
            data = self._load(self.jobs_path)
            for job in data:
                if job.get('_id') == job_id:
                    if not mutate(job):
                        return False
                    self._save(self.jobs_path, data)
                    return True
        return False

    def push_embedded_resume(self, job_id: str, snapshot: Dict) -> bool:
        def push(job):
            job.setdefault('resumes', []).append(self._roundtrip(snapshot))
            return True
        return self._update_job(job_id, push)

    def update_embedded_resume_status(self, job_id: str, resume_id: str, status: str) -> bool:
        def set_status(job):
            for embedded in job.get('resumes', []):
                if embedded.get('_id') == resume_id:
                    embedded['status'] = status
                    return True
            return False
        return self._update_job(job_id, set_status)

    def replace_embedded_resume(self, job_id: str, snapshot: Dict) -> bool:
        def replace(job):
            resumes = job.setdefault('resumes', [])
            for i, embedded in enumerate(resumes):
                if embedded.get('_id') == snapshot['_id']:
                    resumes[i] = self._roundtrip(snapshot)
                    return True
            resumes.append(self._roundtrip(snapshot))
            return True
        return self._update_job(job_id, replace)

    def embedded_phone_exists(self, job_id: str, phone: str) -> bool:
        job = self.get_job_by_id(job_id)
        if not job:
            return False
        return any(r.get('candidate_phone') == phone for r in job.get('resumes', []))

    # resumes
    def insert_resume(self, resume_doc: Dict) -> str:
        with self._lock:
            if self.find_resume_by_phone(resume_doc['candidate_phone'], resume_doc['job_id']):
                logger.warning(
                    f"Duplicate resume rejected by store: phone {resume_doc['candidate_phone']} "
                    f"already stored for job {resume_doc['job_id']}"
                )
                raise DuplicateSubmission()
            return self._insert(self.resumes_path, resume_doc)

    def delete_resume(self, resume_id: str) -> bool:
        with self._lock:
            data = self._load(self.resumes_path)
            remaining = [r for r in data if r.get('_id') != resume_id]
            if len(remaining) == len(data):
                return False
            self._save(self.resumes_path, remaining)
            return True

    def get_resume_by_id(self, resume_id: str) -> Optional[Dict]:
        return self._find_one(self.resumes_path, lambda r: r.get('_id') == resume_id)

    def find_resume_by_phone(self, phone: str, job_id: str) -> Optional[Dict]:
        return self._find_one(
            self.resumes_path,
            lambda r: r.get('candidate_phone') == phone and r.get('job_id') == job_id
        )

    def get_resumes_by_job(self, job_id: Optional[str] = None) -> List[Dict]:
        data = self._load(self.resumes_path)
        if job_id:
            data = [r for r in data if r.get('job_id') == job_id]
        return sorted(data, key=lambda r: r.get('created_at') or '')

    def get_resumes_by_agency(self, agency_id: str) -> List[Dict]:
        data = [r for r in self._load(self.resumes_path) if r.get('uploaded_by_agency_id') == agency_id]
        return sorted(data, key=lambda r: r.get('created_at') or '', reverse=True)

    def update_resume_status(self, resume_id: str, expected_status: str, new_status: str) -> Optional[Dict]:
        with self._lock:
            data = self._load(self.resumes_path)
            for resume in data:
                if resume.get('_id') == resume_id and resume.get('status') == expected_status:
                    resume['status'] = new_status
                    self._save(self.resumes_path, data)
                    return resume
        return None

    # notifications
    def insert_notification(self, notification_doc: Dict) -> str:
        return self._insert(self.notifications_path, notification_doc)

    def get_notifications_for_user(self, user_id: str) -> List[Dict]:
        data = [n for n in self._load(self.notifications_path) if n.get('recipient_user_id') == user_id]
        return sorted(data, key=lambda n: n.get('created_at') or '', reverse=True)

    def mark_notifications_read(self, user_id: str) -> int:
        with self._lock:
            data = self._load(self.notifications_path)
            count = 0
            for n in data:
                if n.get('recipient_user_id') == user_id and not n.get('read'):
                    n['read'] = True
                    count += 1
            if count:
                self._save(self.notifications_path, data)
            return count

    def get_notified_job_ids(self) -> List[str]:
        seen = []
        for n in self._load(self.notifications_path):
            job_id = n.get('job_id')
            if n.get('type') == NEW_JOB and not n.get('expired') and job_id and job_id not in seen:
                seen.append(job_id)
        return seen

    def expire_job_notifications(self, job_ids: List[str]) -> int:
        job_ids = set(job_ids)
        if not job_ids:
            return 0
        with self._lock:
            data = self._load(self.notifications_path)
            count = 0
            for n in data:
                if n.get('type') == NEW_JOB and n.get('job_id') in job_ids and not n.get('expired'):
                    n['expired'] = True
                    count += 1
            if count:
                self._save(self.notifications_path, data)
            return count
