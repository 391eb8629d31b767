from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from facility_archive.core.config import settings
from facility_archive.core.firebase_init import initialize_firebase, get_firebase_status

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Facility Archive API",
    description="Archive reporting and maintenance housekeeping for facility management",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    logger.info("🔥 Initializing Firebase for FastAPI app...")
    if not get_firebase_status()['available'] and not initialize_firebase():
        logger.warning("⚠️ Firebase initialization failed - store-backed endpoints will report errors")


def safe_include_router(router_module_path: str, router_name: str = "router"):
    """Safely include a router with error handling"""
    try:
        module = __import__(router_module_path, fromlist=[router_name])
        router = getattr(module, router_name)
        app.include_router(router)
        logger.info(f"✅ Successfully included {router_module_path}")
        return True
    except Exception as e:
        logger.error(f"❌ Failed to include {router_module_path}: {str(e)}", exc_info=True)
        return False


routers_to_load = [
    ("facility_archive.routers.archive", "Archive Reports"),
    ("facility_archive.routers.maintenance", "Maintenance Housekeeping"),
]

successful_routers = []
failed_routers = []
for module_path, description in routers_to_load:
    if safe_include_router(module_path):
        successful_routers.append(description)
    else:
        failed_routers.append(description)

logger.info(f"Loaded routers: {successful_routers}")
if failed_routers:
    logger.warning(f"Failed routers: {failed_routers}")


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "firebase": get_firebase_status(),
        "routers_loaded": successful_routers,
        "routers_failed": failed_routers,
    }
