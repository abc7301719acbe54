import os
import random
import time
import logging

from portal.config import Config

logger = logging.getLogger(__name__)


class LocalBlobStore:
    """Uploaded PDFs on local disk, addressed by their /uploads/... URL."""

    def __init__(self, upload_dir: str = None, url_prefix: str = None):
        self.upload_dir = upload_dir or Config.UPLOAD_DIR
        self.url_prefix = (url_prefix or Config.UPLOAD_URL_PREFIX).rstrip("/")
        os.makedirs(self.upload_dir, exist_ok=True)

    def save(self, data: bytes, filename: str) -> str:
        safe_name = os.path.basename(filename or "resume.pdf").replace(" ", "_")
        stored_name = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}-{safe_name}"
        with open(os.path.join(self.upload_dir, stored_name), "wb") as f:
            f.write(data)
        return f"{self.url_prefix}/{stored_name}"

    def path_for(self, url: str) -> str:
        return os.path.join(self.upload_dir, os.path.basename(url))

    def exists(self, url: str) -> bool:
        return os.path.exists(self.path_for(url))

    def delete(self, url: str):
        try:
            os.unlink(self.path_for(url))
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Failed to delete blob {url}: {e}")
