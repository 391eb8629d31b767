from celery import Celery
from celery.schedules import crontab
from .config import settings

# Create Celery instance
celery_app = Celery(
    "facility_archive",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=[
        "facility_archive.tasks.archive_tasks",
        "facility_archive.tasks.maintenance_tasks",
        "facility_archive.tasks.analytics_tasks",
    ]
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=30 * 60,  # 30 minutes
    task_soft_time_limit=25 * 60,  # 25 minutes
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,
)

# Periodic task schedule
celery_app.conf.beat_schedule = {
    # Generate next week's preventive maintenance tasks (Mondays 05:00 UTC)
    'generate-weekly-maintenance-tasks': {
        'task': 'facility_archive.tasks.maintenance_tasks.generate_weekly_maintenance_tasks',
        'schedule': crontab(minute=0, hour=5, day_of_week=1),
    },
    # Archive completed maintenance tasks
    'archive-completed-maintenance-tasks': {
        'task': 'facility_archive.tasks.archive_tasks.archive_completed_maintenance_tasks',
        'schedule': 3600.0,  # Every hour
    },
    # Refresh dashboard statistics
    'update-dashboard-stats': {
        'task': 'facility_archive.tasks.analytics_tasks.update_dashboard_stats',
        'schedule': 900.0,  # Every 15 minutes
    },
}
