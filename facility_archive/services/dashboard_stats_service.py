from typing import Dict, Any, Optional
from datetime import datetime, timezone
import asyncio
import logging
import math

from ..database.collections import COLLECTIONS
from ..database.database_service import database_service
from .archive_dates import coerce_instant

logger = logging.getLogger(__name__)

SUMMARY_DOC = "summary"


class DashboardStatsError(Exception):
    pass


def _percent(part: int, whole: int) -> int:
    # Half-up rounding
    return math.floor(part / whole * 100 + 0.5) if whole > 0 else 0


class DashboardStatsService:
    def __init__(self):
        self.db = database_service

    async def update_dashboard_stats(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Recount work orders by status and store the dashboard summary"""
        now = now or datetime.now(timezone.utc)

        success, work_orders, error = await self.db.get_all_documents(COLLECTIONS['work_orders'])
        if not success:
            raise DashboardStatsError(f"Failed to get work orders: {error}")

        counts = {
            'openOrders': 0,
            'completedOrders': 0,
            'inProgressOrders': 0,
            'overdueOrders': 0,
            'scheduledOrders': 0,
            'pendingOrders': 0,
        }

        for order in work_orders:
            status = str(order.get('status') or '').lower() or None

            if status == 'completed':
                counts['completedOrders'] += 1
            elif status in ('in progress', 'in_progress'):
                counts['inProgressOrders'] += 1
                counts['openOrders'] += 1
            elif status == 'scheduled':
                counts['scheduledOrders'] += 1
                counts['openOrders'] += 1
            elif status == 'pending':
                counts['pendingOrders'] += 1
                counts['openOrders'] += 1
            elif status == 'open':
                counts['openOrders'] += 1

            due_date = coerce_instant(order.get('dueDate'))
            if due_date and status != 'completed' and due_date < now:
                counts['overdueOrders'] += 1

        (users_ok, total_users, users_error), (tasks_ok, total_tasks, tasks_error) = await asyncio.gather(
            self.db.count_documents(COLLECTIONS['users']),
            self.db.count_documents(COLLECTIONS['maintenance_tasks']),
        )
        if not users_ok or not tasks_ok:
            raise DashboardStatsError(f"Failed to count documents: {users_error or tasks_error}")

        total_work_orders = len(work_orders)
        stats = {
            'totalWorkOrders': total_work_orders,
            **counts,
            'totalUsers': total_users,
            'totalTasks': total_tasks,
            'lastUpdated': now,
            'lastCalculated': now,
            'completionRate': _percent(counts['completedOrders'], total_work_orders),
            'overdueRate': _percent(counts['overdueOrders'], counts['openOrders']),
        }

        success, error = await self.db.set_document(COLLECTIONS['dashboard_stats'], SUMMARY_DOC, stats, merge=True)
        if not success:
            raise DashboardStatsError(f"Failed to save dashboard stats: {error}")

        logger.info(
            f"📊 Dashboard stats updated: {total_work_orders} work orders, "
            f"{counts['completedOrders']} completed, {counts['overdueOrders']} overdue, "
            f"completion rate {stats['completionRate']}%"
        )
        return stats


dashboard_stats_service = DashboardStatsService()
