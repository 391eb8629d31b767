from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


class PlanFrequency(str, Enum):
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    SEMI_ANNUALLY = "Semi-annually"
    ANNUALLY = "Annually"


# Preventive Maintenance Plan Model
class MaintenancePlan(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    asset_id: Optional[str] = Field(default=None, alias="assetId")
    plan_name: Optional[str] = Field(default=None, alias="planName")
    tasks: List[str] = Field(default_factory=list)
    frequency: Optional[str] = None  # PlanFrequency value; unknown values fall back to weekly
    first_due_date: Optional[datetime] = Field(default=None, alias="firstDueDate")
    assigned_to: Optional[str] = Field(default=None, alias="assignedTo")
    is_active: Optional[bool] = Field(default=None, alias="isActive")
    last_generated: Optional[datetime] = Field(default=None, alias="lastGenerated")


# Maintenance Task Model (as generated from a plan)
class MaintenanceTask(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    plan_id: str = Field(alias="planId")
    asset_id: Optional[str] = Field(default=None, alias="assetId")
    task_description: str = Field(alias="taskDescription")
    type: str = Field(default="Preventive")
    status: str = Field(default="Pending")  # Pending, In Progress, Completed, Skipped
    due_date: datetime = Field(alias="dueDate")
    assigned_to: Optional[str] = Field(default=None, alias="assignedTo")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    created_by: str = Field(default="system_scheduler", alias="createdBy")
    priority: str = Field(default="Medium")
    estimated_duration: Optional[float] = Field(default=None, alias="estimatedDuration")
    actual_duration: Optional[float] = Field(default=None, alias="actualDuration")
    cost: Optional[float] = None
    notes: str = Field(default="")
    completed_at: Optional[datetime] = Field(default=None, alias="completedAt")
    completed_by: Optional[str] = Field(default=None, alias="completedBy")
