from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple
import logging

from dateutil.relativedelta import relativedelta

from ..core.config import settings
from ..database.collections import COLLECTIONS
from ..database.database_service import database_service
from ..models.maintenance_models import MaintenancePlan, MaintenanceTask, PlanFrequency

logger = logging.getLogger(__name__)

FREQUENCY_STEPS = {
    PlanFrequency.DAILY.value: relativedelta(days=1),
    PlanFrequency.WEEKLY.value: relativedelta(weeks=1),
    PlanFrequency.MONTHLY.value: relativedelta(months=1),
    PlanFrequency.QUARTERLY.value: relativedelta(months=3),
    PlanFrequency.SEMI_ANNUALLY.value: relativedelta(months=6),
    PlanFrequency.ANNUALLY.value: relativedelta(years=1),
}

TASK_GENERATION_DOC = "task_generation"


class MaintenancePlanError(Exception):
    pass


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def get_next_due_date(current: datetime, frequency: Optional[str]) -> datetime:
    """Step a due date forward by one plan interval"""
    step = FREQUENCY_STEPS.get(frequency)
    if step is None:
        logger.warning(f"⚠️ Unknown frequency: {frequency}, defaulting to weekly")
        step = FREQUENCY_STEPS[PlanFrequency.WEEKLY.value]
    return current + step


def calculate_due_dates_for_plan(
    plan: MaintenancePlan, window_start: datetime, window_end: datetime, now: datetime
) -> List[datetime]:
    """Due dates of a plan falling inside [window_start, window_end)"""
    if not plan.first_due_date:
        return []

    current = _as_utc(plan.first_due_date)
    # Fast-forward past occurrences that are already behind us
    while current <= now:
        current = get_next_due_date(current, plan.frequency)

    due_dates = []
    while current < window_end:
        if current >= window_start:
            due_dates.append(current)
        current = get_next_due_date(current, plan.frequency)
    return due_dates


def next_week_window(now: datetime) -> Tuple[datetime, datetime]:
    start = (now + timedelta(days=settings.WEEKLY_TASK_LOOKAHEAD_DAYS)).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    return start, start + timedelta(days=7)


class MaintenancePlanService:
    def __init__(self):
        self.db = database_service

    async def _task_exists(self, plan_id: str, description: str, due_date: datetime) -> bool:
        success, existing, error = await self.db.query_documents(
            COLLECTIONS['maintenance_tasks'],
            [
                ('planId', '==', plan_id),
                ('taskDescription', '==', description),
                ('dueDate', '==', due_date),
            ],
            limit=1,
        )
        if not success:
            raise MaintenancePlanError(f"Failed to check existing tasks: {error}")
        return bool(existing)

    async def generate_weekly_tasks(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Create the preventive maintenance tasks due next week.

        Active plans are expanded into one task per due date and plan task;
        tasks that already exist are left alone. A broken plan is logged and
        skipped, a failure to read plans or to commit aborts the run.
        """
        now = _as_utc(now or datetime.now(timezone.utc))
        logger.info("🚀 Starting weekly task generation process...")

        success, plan_docs, error = await self.db.get_all_documents(COLLECTIONS['maintenance_plans'])
        if not success:
            raise MaintenancePlanError(f"Failed to get maintenance plans: {error}")

        # Plans without an isActive flag count as active
        active_plans = [doc for doc in plan_docs if doc.get('isActive') is not False]
        week_start, week_end = next_week_window(now)

        result = {
            'status': 'completed',
            'tasks_generated': 0,
            'plans_processed': len(active_plans),
            'week_start': week_start.isoformat(),
            'week_end': week_end.isoformat(),
        }

        if not active_plans:
            logger.info("ℹ️ No active maintenance plans found")
            return result

        logger.info(f"📋 Found {len(active_plans)} active maintenance plans")

        writes = []
        tasks_generated = 0

        for doc in active_plans:
            plan_id = doc.get('id')
            try:
                plan = MaintenancePlan(**doc)

                if not plan.tasks:
                    logger.warning(f"⚠️ Plan {plan_id} has no tasks, skipping...")
                    continue
                if not plan.frequency:
                    logger.warning(f"⚠️ Plan {plan_id} has no frequency, skipping...")
                    continue

                due_dates = calculate_due_dates_for_plan(plan, week_start, week_end, now)
                if not due_dates:
                    continue

                for due_date in due_dates:
                    for description in plan.tasks:
                        if await self._task_exists(plan_id, description, due_date):
                            continue

                        task = MaintenanceTask(
                            plan_id=plan_id,
                            asset_id=plan.asset_id,
                            task_description=description,
                            due_date=due_date,
                            assigned_to=plan.assigned_to,
                            created_at=now,
                        )
                        writes.append(('set', COLLECTIONS['maintenance_tasks'], None, task.model_dump(by_alias=True)))
                        tasks_generated += 1

                writes.append(('update', COLLECTIONS['maintenance_plans'], plan_id, {'lastGenerated': now}))

            except Exception as e:
                logger.error(f"❌ Error processing plan {plan_id}: {str(e)}")

        if tasks_generated == 0:
            logger.info("ℹ️ No new tasks needed for next week")
            return result

        success, error = await self.db.batch_write(writes)
        if not success:
            raise MaintenancePlanError(f"Failed to save generated tasks: {error}")

        logger.info(f"✅ Successfully generated {tasks_generated} tasks for next week")

        ok, error = await self.db.set_document(
            COLLECTIONS['system_stats'],
            TASK_GENERATION_DOC,
            {
                'lastRun': now,
                'tasksGenerated': tasks_generated,
                'plansProcessed': len(active_plans),
                'weekStart': week_start,
                'weekEnd': week_end,
            },
            merge=True,
        )
        if not ok:
            logger.error(f"❌ Error updating task generation stats: {error}")

        result['tasks_generated'] = tasks_generated
        return result

    async def delete_plan_tasks(self, plan_id: str) -> int:
        """Delete every maintenance task generated from a plan"""
        success, tasks, error = await self.db.query_documents(
            COLLECTIONS['maintenance_tasks'], [('planId', '==', plan_id)]
        )
        if not success:
            raise MaintenancePlanError(f"Failed to get tasks for plan {plan_id}: {error}")

        if not tasks:
            logger.info(f"No tasks linked to plan {plan_id}")
            return 0

        success, error = await self.db.batch_delete(
            COLLECTIONS['maintenance_tasks'], [task['id'] for task in tasks]
        )
        if not success:
            raise MaintenancePlanError(f"Failed to delete tasks for plan {plan_id}: {error}")

        logger.info(f"Deleted {len(tasks)} tasks linked to plan {plan_id}")
        return len(tasks)

    async def cleanup_orphan_tasks(self) -> int:
        """Delete tasks whose plan no longer exists; tasks without a plan are kept"""
        success, plans, error = await self.db.get_all_documents(COLLECTIONS['maintenance_plans'])
        if not success:
            raise MaintenancePlanError(f"Failed to get maintenance plans: {error}")

        success, tasks, error = await self.db.get_all_documents(COLLECTIONS['maintenance_tasks'])
        if not success:
            raise MaintenancePlanError(f"Failed to get maintenance tasks: {error}")

        valid_plan_ids = {plan['id'] for plan in plans}
        orphan_ids = [
            task['id'] for task in tasks
            if task.get('planId') and task['planId'] not in valid_plan_ids
        ]

        if orphan_ids:
            success, error = await self.db.batch_delete(COLLECTIONS['maintenance_tasks'], orphan_ids)
            if not success:
                raise MaintenancePlanError(f"Failed to delete orphan tasks: {error}")

        logger.info(f"[cleanup_orphan_tasks] Deleted {len(orphan_ids)} orphan tasks")
        return len(orphan_ids)


maintenance_plan_service = MaintenancePlanService()
