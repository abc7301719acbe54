"""
Shared fixtures: a JSON-file store in tmp_path, a local blob store, and an
email dispatcher whose sender records messages instead of mailing them.
"""
import os
import tempfile

# must be set before portal.config is imported
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="portal-uploads-"))
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="portal-data-"))
os.environ["EMAIL_PROVIDER"] = "console"
os.environ["USE_LOCAL_DB"] = "true"

import threading
from datetime import timedelta

import pytest

from portal.api.deps import Services
from portal.database.local_storage import LocalStorage
from portal.services.blob_store import LocalBlobStore
from portal.services.mailer import EmailDispatcher
from portal.utils import utcnow


def make_pdf(*lines: str) -> bytes:
    """Build a one-page PDF whose text layer holds the given lines."""
    ops = ["BT", "/F1 12 Tf", "14 TL", "72 720 Td"]
    for line in lines:
        escaped = line.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
        ops.append(f"({escaped}) Tj T*")
    ops.append("ET")
    stream = "\n".join(ops).encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Resources << /Font << /F1 4 0 R >> >> /Contents 5 0 R >>",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_at = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_at)
    return bytes(out)


class RecordingSender:
    def __init__(self):
        self.sent = []
        self.fail_for = set()
        self._lock = threading.Lock()

    def __call__(self, to, subject, html):
        if to in self.fail_for:
            raise ConnectionError(f"SMTP refused {to}")
        with self._lock:
            self.sent.append((to, subject, html))

    def to(self, address):
        return [m for m in self.sent if m[0] == address]


@pytest.fixture
def db(tmp_path):
    return LocalStorage(str(tmp_path / "data"))


@pytest.fixture
def blobs(tmp_path):
    return LocalBlobStore(str(tmp_path / "uploads"))


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def dispatcher(sender):
    d = EmailDispatcher(sender=sender, max_workers=2)
    yield d
    d.shutdown()


@pytest.fixture
def services(db, blobs, dispatcher):
    return Services(db=db, blob_store=blobs, dispatcher=dispatcher)


@pytest.fixture
def admin(services):
    return services.users.create_user("Portal Admin", "admin@portal.test", "admin")


@pytest.fixture
def agency_a(services):
    return services.users.create_user("Acme Talent", "hr@acme.test", "agency")


@pytest.fixture
def agency_b(services):
    return services.users.create_user("Bright Hire", "jobs@brighthire.test", "agency")


@pytest.fixture
def job(services, admin, agency_a, agency_b):
    return services.jobs.create_job(
        "Backend Engineer",
        "Build our APIs. Details: https://careers.example.com/backend",
        utcnow() + timedelta(days=1),
    )


@pytest.fixture
def expired_job(services, admin, agency_a):
    return services.jobs.create_job("Data Analyst", "Closed role", utcnow() - timedelta(days=1))


@pytest.fixture
def resume_pdf():
    return make_pdf("Jane Doe", "Call me at +91 9876543210", "Python, FastAPI")


@pytest.fixture
def submitted(services, job, agency_a, resume_pdf):
    return services.resumes.submit_resume(job.id, agency_a.email, resume_pdf, filename="jane.pdf")
