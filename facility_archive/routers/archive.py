from fastapi import APIRouter, HTTPException
from fastapi.responses import Response
import logging

from ..models.archive_models import (
    AdvancedSearchParams, ArchiveReportRequest, ArchiveReportResponse,
    ArchiveSearchResult, CsvExportRequest, ReportFormat
)
from ..services.archive_report_service import archive_report_service
from ..services.archive_search_service import archive_search_service
from ..services.csv_export_service import CSV_BOM, convert_to_csv, csv_filename, to_export_rows

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/archive", tags=["archive"])


def _csv_response(csv_text: str, filename: str) -> Response:
    return Response(
        content=CSV_BOM + csv_text,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/reports", response_model=ArchiveReportResponse)
async def generate_archive_report(request: ArchiveReportRequest):
    """Generate an archive report; CSV requests get the report rows as a download"""
    response = await archive_report_service.generate_archive_report(request)

    if request.format == ReportFormat.CSV and response.success:
        return _csv_response(
            convert_to_csv(response.data or []),
            csv_filename(request.report_type.value),
        )

    return response


@router.post("/search", response_model=ArchiveSearchResult)
async def advanced_archive_search(params: AdvancedSearchParams):
    """Keyword and filter search across the archive collections"""
    return await archive_search_service.advanced_archive_search(params)


@router.post("/export")
async def export_records(body: CsvExportRequest):
    """Convert records to CSV, optionally projected onto the display columns"""
    if not body.records:
        raise HTTPException(status_code=400, detail="There are no records to export")

    rows = to_export_rows(body.records) if body.display_columns else body.records
    logger.info(f"Exporting {len(rows)} records to CSV")
    return _csv_response(convert_to_csv(rows), csv_filename("export"))
