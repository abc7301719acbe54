"""
Outgoing email.

Supports:
- SMTP (Gmail, etc.) when EMAIL_PROVIDER=smtp and SMTP_USER is set
- Console output (logged) otherwise

Mail is never sent on the request path: callers hand messages to an
EmailDispatcher, which sends them on a worker pool and logs failures per
recipient.
"""
import smtplib
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait as wait_futures
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Callable, List

from portal.config import Config

logger = logging.getLogger(__name__)


def send_email_smtp(to: str, subject: str, html: str):
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = Config.EMAIL_FROM
    msg["To"] = to
    msg.attach(MIMEText(html, "html"))

    with smtplib.SMTP(Config.SMTP_HOST, Config.SMTP_PORT, timeout=30) as server:
        server.starttls()
        server.login(Config.SMTP_USER, Config.SMTP_PASSWORD)
        server.sendmail(Config.EMAIL_FROM, [to], msg.as_string())
    logger.info(f"Email sent successfully to {to}")


def send_email_console(to: str, subject: str, html: str):
    logger.info(f"=== EMAIL WOULD BE SENT ===\nTo: {to}\nSubject: {subject}\nContent: {html}\n=== END EMAIL ===")


def send_email(to: str, subject: str, html: str):
    """Send with the configured provider. Raises on delivery failure."""
    if Config.EMAIL_PROVIDER == "smtp" and Config.SMTP_USER:
        send_email_smtp(to, subject, html)
    else:
        send_email_console(to, subject, html)


class EmailDispatcher:
    def __init__(self, sender: Callable[[str, str, str], None] = None, max_workers: int = None):
        self.sender = sender or send_email
        self._pool = ThreadPoolExecutor(
            max_workers=max_workers or Config.EMAIL_WORKERS,
            thread_name_prefix="email_worker"
        )
        self._pending: List = []
        self._lock = threading.Lock()

    def _deliver(self, to: str, subject: str, html: str) -> bool:
        try:
            self.sender(to, subject, html)
            return True
        except Exception as e:
            logger.error(f"[Email] Failed to send '{subject}' to {to}: {e}")
            return False

    def submit(self, to: str, subject: str, html: str):
        """Queue one email and return immediately."""
        if not to:
            return None
        future = self._pool.submit(self._deliver, to, subject, html)
        with self._lock:
            self._pending = [f for f in self._pending if not f.done()]
            self._pending.append(future)
        return future

    def wait(self, timeout: float = None):
        """Block until every queued email has been attempted."""
        with self._lock:
            pending = list(self._pending)
        wait_futures(pending, timeout=timeout)

    def shutdown(self):
        self._pool.shutdown(wait=True)
