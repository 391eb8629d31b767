from fastapi import APIRouter, HTTPException, Path
import logging

from ..services.dashboard_stats_service import dashboard_stats_service
from ..services.maintenance_archive_service import maintenance_archive_service
from ..services.maintenance_plan_service import maintenance_plan_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@router.post("/tasks/generate-weekly")
async def generate_weekly_tasks():
    """Run the weekly preventive maintenance task generation now"""
    try:
        result = await maintenance_plan_service.generate_weekly_tasks()
        return {"success": True, "data": result}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to generate weekly tasks: {str(e)}")


@router.post("/tasks/archive")
async def archive_completed_tasks():
    """Archive completed maintenance tasks past the retention window"""
    try:
        result = await maintenance_archive_service.archive_completed_tasks()
        return {"success": True, "data": result}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to archive tasks: {str(e)}")


@router.delete("/plans/{plan_id}/tasks")
async def delete_plan_tasks(plan_id: str = Path(..., description="Maintenance plan ID")):
    """Delete all tasks generated from a maintenance plan"""
    try:
        deleted = await maintenance_plan_service.delete_plan_tasks(plan_id)
        return {"success": True, "deleted": deleted}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to delete plan tasks: {str(e)}")


@router.post("/tasks/cleanup-orphans")
async def cleanup_orphan_tasks():
    """Delete tasks whose maintenance plan no longer exists"""
    try:
        deleted = await maintenance_plan_service.cleanup_orphan_tasks()
        return {"success": True, "deleted": deleted}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to clean up orphan tasks: {str(e)}")


@router.post("/dashboard-stats/refresh")
async def refresh_dashboard_stats():
    """Recalculate the dashboard summary"""
    try:
        stats = await dashboard_stats_service.update_dashboard_stats()
        return {"success": True, "data": stats}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update dashboard stats: {str(e)}")
