# portal/config.py
import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    # DB (set USE_LOCAL_DB=false and MONGODB_URI to run against MongoDB)
    MONGODB_URI = os.getenv('MONGODB_URI', 'mongodb://localhost:27017')
    DATABASE_NAME = os.getenv('DATABASE_NAME', "recruitment_portal")
    USE_LOCAL_DB = _flag('USE_LOCAL_DB', 'true')
    DATA_DIR = os.getenv('DATA_DIR', "./data")

    # Collections / file names
    JOBS_COLLECTION = "jobs"
    RESUMES_COLLECTION = "resumes"
    NOTIFICATIONS_COLLECTION = "notifications"
    USERS_COLLECTION = "users"

    # Uploaded PDFs
    UPLOAD_DIR = os.getenv('UPLOAD_DIR', "./uploads")
    UPLOAD_URL_PREFIX = "/uploads"

    # Email: "smtp" or "console"
    EMAIL_PROVIDER = os.getenv('EMAIL_PROVIDER', "console")
    SMTP_HOST = os.getenv('SMTP_HOST', "smtp.gmail.com")
    SMTP_PORT = int(os.getenv('SMTP_PORT', 587))
    SMTP_USER = os.getenv('SMTP_USER', '')
    SMTP_PASSWORD = os.getenv('SMTP_PASSWORD', '')
    EMAIL_FROM = os.getenv('EMAIL_FROM', "no-reply@recruitment-portal.local")
    EMAIL_WORKERS = int(os.getenv('EMAIL_WORKERS', 4))

    CORS_ORIGINS = [o.strip() for o in os.getenv('CORS_ORIGINS', "*").split(",") if o.strip()]
    LOG_LEVEL = os.getenv('LOG_LEVEL', "INFO").upper()
