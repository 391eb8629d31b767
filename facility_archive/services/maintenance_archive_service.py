from typing import Dict, Any, Optional
from datetime import datetime, timezone
import logging
import math

from ..core.config import settings
from ..database.collections import COLLECTIONS
from ..database.database_service import database_service
from .archive_dates import coerce_instant

logger = logging.getLogger(__name__)

ARCHIVABLE_STATUSES = ["Completed", "Skipped"]
ARCHIVE_STATS_DOC = "archive_stats"

ARCHIVED = "archived"
PENDING = "pending"
SKIPPED = "skipped"


class MaintenanceArchiveError(Exception):
    pass


class MaintenanceArchiveService:
    def __init__(self):
        self.db = database_service

    async def evaluate_task_for_archive(self, task_id: str, task: Dict[str, Any], now: Optional[datetime] = None) -> str:
        """
        Archive a finished maintenance task once it has been done for long enough.

        Returns ``archived``, ``pending`` (not old enough yet) or ``skipped``.
        Raises MaintenanceArchiveError when the task update itself fails.
        """
        now = now or datetime.now(timezone.utc)

        if not task_id:
            logger.warning("⚠️ Archive check called without a task id")
            return SKIPPED

        if task.get('status') not in ARCHIVABLE_STATUSES or task.get('archived'):
            return SKIPPED

        completed_on = coerce_instant(task.get('completedAt')) or coerce_instant(task.get('dueDate'))
        if completed_on is None:
            logger.warning(f"⚠️ No completion or due date for task {task_id}")
            return SKIPPED

        days_since_completion = (now - completed_on).total_seconds() / 86400

        if days_since_completion < settings.ARCHIVE_AFTER_DAYS:
            remaining = settings.ARCHIVE_AFTER_DAYS - days_since_completion
            logger.info(f"ℹ️ Task {task_id} will be archived in {math.ceil(remaining)} days")
            return PENDING

        logger.info(f"📋 Archiving task {task_id} after {round(days_since_completion)} days")
        success, error = await self.db.update_document(
            COLLECTIONS['maintenance_tasks'],
            task_id,
            {
                'archived': True,
                'archivedAt': now,
                'archivedReason': 'Auto-archived after completion',
            },
        )
        if not success:
            raise MaintenanceArchiveError(f"Failed to archive task {task_id}: {error}")

        logger.info(f"✅ Task {task_id} archived successfully")
        await self._update_archive_stats(now)
        return ARCHIVED

    async def _update_archive_stats(self, now: datetime) -> None:
        """Bump the daily and total archive counters; failures here never undo an archive"""
        try:
            today = now.date().isoformat()
            success, stats, error = await self.db.get_document(COLLECTIONS['system_stats'], ARCHIVE_STATS_DOC)

            if success:
                daily = dict(stats.get('daily') or {})
                daily[today] = daily.get(today, 0) + 1
                ok, error = await self.db.update_document(
                    COLLECTIONS['system_stats'],
                    ARCHIVE_STATS_DOC,
                    {
                        'daily': daily,
                        'totalArchived': int(stats.get('totalArchived') or 0) + 1,
                        'lastArchived': now,
                    },
                )
            elif error == "Document not found":
                ok, error = await self.db.set_document(
                    COLLECTIONS['system_stats'],
                    ARCHIVE_STATS_DOC,
                    {
                        'daily': {today: 1},
                        'totalArchived': 1,
                        'lastArchived': now,
                        'createdAt': now,
                    },
                )
            else:
                ok = False

            if not ok:
                logger.error(f"❌ Error updating archive stats: {error}")

        except Exception as e:
            logger.error(f"❌ Error updating archive stats: {str(e)}")

    async def archive_completed_tasks(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Sweep finished, unarchived maintenance tasks and archive the old ones"""
        now = now or datetime.now(timezone.utc)

        success, tasks, error = await self.db.query_documents(
            COLLECTIONS['maintenance_tasks'],
            [('status', 'in', ARCHIVABLE_STATUSES)],
        )
        if not success:
            raise MaintenanceArchiveError(f"Failed to get maintenance tasks: {error}")

        outcome = {ARCHIVED: 0, PENDING: 0, SKIPPED: 0, 'failed': 0}
        candidates = [task for task in tasks if not task.get('archived')]

        for task in candidates:
            try:
                result = await self.evaluate_task_for_archive(task.get('id'), task, now=now)
                outcome[result] += 1
            except Exception as e:
                logger.error(f"❌ Error archiving task {task.get('id')}: {str(e)}")
                outcome['failed'] += 1

        logger.info(
            f"Archive sweep checked {len(candidates)} tasks: "
            f"{outcome[ARCHIVED]} archived, {outcome[PENDING]} pending, {outcome['failed']} failed"
        )
        return {
            'status': 'completed',
            'evaluated': len(candidates),
            **outcome,
            'timestamp': now.isoformat(),
        }


maintenance_archive_service = MaintenanceArchiveService()
