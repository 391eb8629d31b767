from datetime import datetime
import asyncio
import logging
from ..core.celery_app import celery_app
from ..services.maintenance_plan_service import maintenance_plan_service

logger = logging.getLogger(__name__)

@celery_app.task(bind=True)
def generate_weekly_maintenance_tasks(self):
    """Generate preventive maintenance tasks for next week"""
    try:
        logger.info("Starting weekly preventive maintenance task generation")
        result = asyncio.run(maintenance_plan_service.generate_weekly_tasks())
        logger.info(f"Successfully generated {result['tasks_generated']} maintenance tasks")
        return result

    except Exception as e:
        logger.error(f"Error in weekly maintenance task generation: {str(e)}")
        raise self.retry(exc=e, countdown=60, max_retries=3)

@celery_app.task(bind=True)
def delete_plan_tasks(self, plan_id: str):
    """Delete the tasks of a removed maintenance plan"""
    try:
        deleted = asyncio.run(maintenance_plan_service.delete_plan_tasks(plan_id))
        return {
            'status': 'completed',
            'plan_id': plan_id,
            'tasks_deleted': deleted,
            'timestamp': datetime.now().isoformat()
        }

    except Exception as e:
        logger.error(f"Error deleting tasks for plan {plan_id}: {str(e)}")
        raise self.retry(exc=e, countdown=60, max_retries=3)

@celery_app.task(bind=True)
def cleanup_orphan_maintenance_tasks(self):
    """Delete maintenance tasks whose plan no longer exists"""
    try:
        deleted = asyncio.run(maintenance_plan_service.cleanup_orphan_tasks())
        return {
            'status': 'completed',
            'tasks_deleted': deleted,
            'timestamp': datetime.now().isoformat()
        }

    except Exception as e:
        logger.error(f"Error cleaning up orphan maintenance tasks: {str(e)}")
        raise self.retry(exc=e, countdown=60, max_retries=3)
