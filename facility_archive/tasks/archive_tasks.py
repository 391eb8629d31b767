from datetime import datetime
import asyncio
import logging
from ..core.celery_app import celery_app
from ..services.maintenance_archive_service import maintenance_archive_service

logger = logging.getLogger(__name__)

@celery_app.task(bind=True)
def archive_completed_maintenance_tasks(self):
    """Archive maintenance tasks completed longer ago than the retention window"""
    try:
        logger.info("Starting archive sweep of completed maintenance tasks")
        result = asyncio.run(maintenance_archive_service.archive_completed_tasks())
        logger.info(f"Archive sweep finished: {result['archived']} archived, {result['failed']} failed")
        return result

    except Exception as e:
        logger.error(f"Error in maintenance archive sweep: {str(e)}")
        raise self.retry(exc=e, countdown=60, max_retries=3)

@celery_app.task(bind=True)
def archive_maintenance_task(self, task_id: str, task_data: dict):
    """Evaluate a single updated maintenance task for archiving"""
    try:
        outcome = asyncio.run(maintenance_archive_service.evaluate_task_for_archive(task_id, task_data))
        return {
            'status': 'completed',
            'task_id': task_id,
            'outcome': outcome,
            'timestamp': datetime.now().isoformat()
        }

    except Exception as e:
        logger.error(f"Error archiving maintenance task {task_id}: {str(e)}")
        raise self.retry(exc=e, countdown=60, max_retries=3)
