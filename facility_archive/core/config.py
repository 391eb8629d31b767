# facility_archive/core/config.py
import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    FIREBASE_PROJECT_ID: str = os.getenv("FIREBASE_PROJECT_ID", "facility-archive")
    FIREBASE_SERVICE_ACCOUNT_PATH: str = os.getenv(
        "FIREBASE_SERVICE_ACCOUNT_PATH",
        "firebase-service-account.json",
    )
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Archive reporting limits
    ARCHIVE_FETCH_LIMIT: int = int(os.getenv("ARCHIVE_FETCH_LIMIT", "5000"))
    ARCHIVE_SEARCH_LIMIT: int = int(os.getenv("ARCHIVE_SEARCH_LIMIT", "500"))
    # Firestore rejects "in" filters with more than 10 values
    ARCHIVE_STATUS_IN_MAX: int = int(os.getenv("ARCHIVE_STATUS_IN_MAX", "10"))
    ARCHIVE_AUDIT_SAMPLE_SIZE: int = int(os.getenv("ARCHIVE_AUDIT_SAMPLE_SIZE", "10"))

    # Maintenance housekeeping
    ARCHIVE_AFTER_DAYS: int = int(os.getenv("ARCHIVE_AFTER_DAYS", "14"))
    WEEKLY_TASK_LOOKAHEAD_DAYS: int = int(os.getenv("WEEKLY_TASK_LOOKAHEAD_DAYS", "7"))

    # Frontend URL allowed by CORS
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:5173")


settings = Settings()
