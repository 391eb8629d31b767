import asyncio
import logging
from ..core.celery_app import celery_app
from ..services.dashboard_stats_service import dashboard_stats_service

logger = logging.getLogger(__name__)

@celery_app.task(bind=True)
def update_dashboard_stats(self):
    """Recalculate the work order dashboard summary"""
    try:
        stats = asyncio.run(dashboard_stats_service.update_dashboard_stats())
        return {
            'status': 'completed',
            'total_work_orders': stats['totalWorkOrders'],
            'completion_rate': stats['completionRate'],
            'timestamp': stats['lastCalculated'].isoformat()
        }

    except Exception as e:
        logger.error(f"Error updating dashboard stats: {str(e)}")
        raise self.retry(exc=e, countdown=60, max_retries=3)
