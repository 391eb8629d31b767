from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any
from enum import Enum


class ArchiveKind(str, Enum):
    MAINTENANCE = "maintenance"
    WORK_ORDERS = "work_orders"
    ISSUES = "issues"
    INSPECTIONS = "inspections"


class ReportType(str, Enum):
    MAINTENANCE = "maintenance"
    WORK_ORDERS = "work_orders"
    ISSUES = "issues"
    INSPECTIONS = "inspections"
    ALL = "all"


class ReportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"


class CostBand(str, Enum):
    ALL = "all"
    LOW = "low"        # < 500
    MEDIUM = "medium"  # 500 - 1999.99
    HIGH = "high"      # >= 2000


# Archive Report Request Model
class ArchiveReportRequest(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    report_type: ReportType = Field(alias="reportType")
    date_from: Optional[str] = Field(default=None, alias="dateFrom")  # YYYY-MM-DD
    date_to: Optional[str] = Field(default=None, alias="dateTo")  # YYYY-MM-DD, whole day included
    status: Optional[str] = None  # specific status or "all"
    include_financials: bool = Field(default=False, alias="includeFinancials")
    format: ReportFormat = ReportFormat.JSON
    requested_by: str = Field(alias="requestedBy")


class DateRange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date_from: str = Field(alias="from")
    date_to: str = Field(alias="to")


class ReportSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_records: int = Field(default=0, alias="totalRecords")
    by_type: Dict[str, int] = Field(default_factory=dict, alias="byType")
    by_status: Dict[str, int] = Field(default_factory=dict, alias="byStatus")
    by_month: Dict[str, int] = Field(default_factory=dict, alias="byMonth")
    total_cost: float = Field(default=0, alias="totalCost")
    average_cost: float = Field(default=0, alias="averageCost")
    date_range: DateRange = Field(alias="dateRange")


class ArchiveReportResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    data: Optional[List[Dict[str, Any]]] = None
    record_count: int = Field(default=0, alias="recordCount")
    generated_at: str = Field(alias="generatedAt")
    error: Optional[str] = None


class AdvancedSearchParams(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    collections: Optional[List[ArchiveKind]] = None  # None means every archive source
    status: Optional[List[str]] = None
    date_from: Optional[str] = Field(default=None, alias="dateFrom")
    date_to: Optional[str] = Field(default=None, alias="dateTo")
    keywords: Optional[str] = None
    limit: Optional[int] = Field(default=None, gt=0)  # per collection
    cost_band: CostBand = Field(default=CostBand.ALL, alias="costBand")


class ArchiveSearchResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    records: List[Dict[str, Any]] = Field(default_factory=list)
    record_count: int = Field(default=0, alias="recordCount")
    errors: Dict[str, str] = Field(default_factory=dict)  # source kind -> error message


class CsvExportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    records: List[Dict[str, Any]] = Field(default_factory=list)
    display_columns: bool = Field(default=False, alias="displayColumns")
