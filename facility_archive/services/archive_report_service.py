from typing import Dict, List, Any, Optional
from datetime import datetime, timezone
import asyncio
import logging

import pandas as pd

from ..core.config import settings
from ..database.collections import ARCHIVE_SOURCES, COLLECTIONS
from ..database.database_service import database_service
from ..models.archive_models import (
    ArchiveReportRequest, ArchiveReportResponse, DateRange, ReportSummary, ReportType
)
from .archive_dates import completion_instant, sort_by_completion
from .archive_fetchers import CollectionFetcher

logger = logging.getLogger(__name__)

UNSPECIFIED = "unspecified"
UNKNOWN_MONTH = "unknown"


class ArchiveReportError(Exception):
    pass


def _numeric_cost(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if pd.isna(number) else number


def _counts(series: pd.Series) -> Dict[str, int]:
    return {str(key): int(count) for key, count in series.value_counts().items()}


def build_report_summary(records: List[Dict[str, Any]], request: ArchiveReportRequest) -> ReportSummary:
    """Counts by type, status and completion month, plus cost totals when requested"""
    summary = ReportSummary(
        total_records=len(records),
        date_range=DateRange(
            date_from=request.date_from or UNSPECIFIED,
            date_to=request.date_to or UNSPECIFIED,
        ),
    )
    if not records:
        return summary

    df = pd.DataFrame(records)

    if 'type' in df.columns:
        summary.by_type = _counts(df['type'].dropna())

    if 'status' in df.columns:
        statuses = df['status'].dropna()
        summary.by_status = _counts(statuses[statuses.astype(bool)])

    instants = [completion_instant(record) for record in records]
    months = pd.Series([instant.strftime('%Y-%m') if instant else None for instant in instants], dtype=object)
    summary.by_month = _counts(months.fillna(UNKNOWN_MONTH))

    if request.include_financials:
        costs = df['cost'].map(_numeric_cost) if 'cost' in df.columns else pd.Series(dtype=float)
        total_cost = float(costs.sum())
        summary.total_cost = round(total_cost, 2)
        summary.average_cost = round(total_cost / len(records), 2)

    return summary


class ArchiveReportService:
    def __init__(self):
        self.db = database_service

    def _kinds_for(self, report_type: ReportType) -> List[str]:
        if report_type == ReportType.ALL:
            return list(ARCHIVE_SOURCES)
        return [report_type.value]

    async def collect_archive_records(self, request: ArchiveReportRequest) -> List[Dict[str, Any]]:
        """Fan out to the selected fetchers, stamp each record's type and sort newest first"""
        fetchers = [CollectionFetcher(kind, self.db) for kind in self._kinds_for(request.report_type)]
        batches = await asyncio.gather(*(fetcher.fetch(request) for fetcher in fetchers))

        records = []
        for fetcher, batch in zip(fetchers, batches):
            records.extend({**record, 'type': fetcher.record_type} for record in batch)

        return sort_by_completion(records)

    async def persist_report_audit(
        self, request: ArchiveReportRequest, summary: ReportSummary, records: List[Dict[str, Any]]
    ) -> str:
        """Store the request, the summary and a small sample of the result; never the full set"""
        audit = {
            'type': 'archive_report',
            'requestDetails': request.model_dump(by_alias=True, mode='json'),
            'summary': summary.model_dump(by_alias=True),
            'recordCount': len(records),
            'generatedAt': datetime.now(timezone.utc),
            'generatedBy': request.requested_by,
            'dataSnapshot': records[:settings.ARCHIVE_AUDIT_SAMPLE_SIZE],
        }

        success, report_id, error = await self.db.create_document(COLLECTIONS['generated_reports'], audit)
        if not success:
            raise ArchiveReportError(f"Failed to save archive report: {error}")
        return report_id

    async def generate_archive_report(self, request: ArchiveReportRequest) -> ArchiveReportResponse:
        """
        Build an archive report for the requested sources and date range.

        The whole result is returned in memory and only an audit record with a
        sample is persisted. Any failure outside the per-collection fetches is
        reported through ``success=False`` instead of raising.
        """
        try:
            logger.info(
                f"🏗️ Generating archive report: type={request.report_type.value} "
                f"range={request.date_from or '*'} → {request.date_to or '*'} "
                f"requested_by={request.requested_by}"
            )

            records = await self.collect_archive_records(request)
            summary = build_report_summary(records, request)
            report_id = await self.persist_report_audit(request, summary, records)

            logger.info(f"✅ Archive report {report_id} generated with {len(records)} records")

            return ArchiveReportResponse(
                success=True,
                data=records,
                record_count=len(records),
                generated_at=datetime.now(timezone.utc).isoformat(),
            )

        except Exception as e:
            logger.error(f"❌ Error generating archive report for {request.requested_by}: {str(e)}")
            return ArchiveReportResponse(
                success=False,
                record_count=0,
                generated_at=datetime.now(timezone.utc).isoformat(),
                error=str(e) or "Unknown error",
            )


archive_report_service = ArchiveReportService()
