import firebase_admin
from firebase_admin import credentials
from typing import Optional
import logging
import os

from .config import settings

logger = logging.getLogger(__name__)

# "service_account", "application_default" or None while uninitialized
_credential_source: Optional[str] = None


def _load_credentials():
    """Prefer the service account file; fall back to application default credentials"""
    path = settings.FIREBASE_SERVICE_ACCOUNT_PATH
    if path and os.path.exists(path):
        return credentials.Certificate(path), "service_account"

    logger.warning(f"Firebase service account file not found at {path}, trying application default credentials")
    return credentials.ApplicationDefault(), "application_default"


def initialize_firebase() -> bool:
    """
    Initialize the Firebase Admin SDK once per process.

    Returns True when an app is available afterwards. Scheduled jobs and the
    API share this, so a second call is a no-op.
    """
    global _credential_source

    if firebase_admin._apps:
        return True

    try:
        cred, source = _load_credentials()
        firebase_admin.initialize_app(cred, {'projectId': settings.FIREBASE_PROJECT_ID})
        _credential_source = source
        logger.info(f"✅ Firebase initialized for project {settings.FIREBASE_PROJECT_ID} ({source})")
        return True

    except Exception as e:
        logger.error(f"❌ Firebase initialization failed: {e}")
        return False


def get_firebase_status() -> dict:
    """Firebase state reported by the health endpoint"""
    return {
        "available": bool(firebase_admin._apps),
        "project_id": settings.FIREBASE_PROJECT_ID,
        "credential_source": _credential_source,
    }
