"""
CSV serialization for archive reports.

The header is the union of keys over all records in first-seen order, so
records with differing shapes keep their columns aligned; a record without
a column gets an empty cell. Every cell is quoted.
"""

import csv
import io
import json
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from ..database.collections import COMPLETION_FIELDS
from .archive_dates import coerce_instant, DEFAULT_COMPLETION_FIELD

# UTF-8 byte order mark so spreadsheet tools pick the right encoding
CSV_BOM = "\ufeff"
NOT_AVAILABLE = "N/A"

EXPORT_COLUMNS = [
    "Type", "Title", "Description", "Status", "Date", "Archived Date",
    "Cost", "Assigned To", "Asset Name", "Completed By",
]


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, default=str, ensure_ascii=False)
    return str(value)


def collect_headers(records: Iterable[Dict[str, Any]]) -> List[str]:
    headers: List[str] = []
    seen = set()
    for record in records:
        for key in record:
            if key not in seen:
                seen.add(key)
                headers.append(key)
    return headers


def convert_to_csv(records: List[Dict[str, Any]]) -> str:
    """Serialize records to CSV text; rows are newline separated without a trailing newline"""
    headers = collect_headers(records)
    if not headers:
        return ""

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    for record in records:
        writer.writerow([_stringify(record.get(header)) for header in headers])

    return buffer.getvalue()[:-1]


def _first_present(record: Dict[str, Any], *fields: str) -> Any:
    for field in fields:
        value = record.get(field)
        if value:
            return value
    return None


def _format_display_date(value: Any) -> str:
    instant = coerce_instant(value)
    if instant is None:
        return NOT_AVAILABLE
    return f"{instant.month}/{instant.day}/{instant.year}"


def to_export_row(record: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten one archive record into the fixed display columns"""
    completion_field = COMPLETION_FIELDS.get(record.get('collectionSource'), DEFAULT_COMPLETION_FIELD)
    cost = record.get('cost')
    return {
        "Type": record.get('type') or "",
        "Title": _first_present(record, 'taskDescription', 'title', 'issueDescription') or "Undefined",
        "Description": _first_present(record, 'description', 'actionTaken', 'notes') or "",
        "Status": record.get('status') or "Undefined",
        "Date": _format_display_date(record.get(completion_field)),
        "Archived Date": _format_display_date(_first_present(record, 'archivedAt', 'closedAt', 'updatedAt')),
        "Cost": cost if cost is not None else 0,
        "Assigned To": _first_present(record, 'assignedTo', 'completedBy') or NOT_AVAILABLE,
        "Asset Name": record.get('assetName') or NOT_AVAILABLE,
        "Completed By": _first_present(record, 'completedBy', 'resolvedBy') or NOT_AVAILABLE,
    }


def to_export_rows(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [to_export_row(record) for record in records]


def csv_filename(report_type: str, today: Optional[date] = None) -> str:
    today = today or datetime.now(timezone.utc).date()
    return f"archive_report_{report_type}_{today.isoformat()}.csv"
