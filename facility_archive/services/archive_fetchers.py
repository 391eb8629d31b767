from typing import Any, Dict, List, Optional, Tuple
import logging

from ..core.config import settings
from ..database.collections import ARCHIVE_SOURCES
from ..database.database_service import database_service
from ..models.archive_models import ArchiveReportRequest
from .archive_dates import parse_range_end, parse_range_start

logger = logging.getLogger(__name__)


class CollectionFetcher:
    """Reads the archived documents of one source collection"""

    def __init__(self, kind: str, db=None, limit: Optional[int] = None):
        source = ARCHIVE_SOURCES[kind]
        self.kind = kind
        self.collection = source['collection']
        self.record_type = source['record_type']
        self.base_filters = list(source['base_filters'])
        self.completion_field = source['completion_field']
        self.db = db or database_service
        self.limit = limit or settings.ARCHIVE_FETCH_LIMIT

    def build_filters(
        self,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        status: Optional[str] = None,
        status_in: Optional[List[str]] = None,
    ) -> List[Tuple[str, str, Any]]:
        """Base archive filter plus the optional date range and status constraints"""
        filters = list(self.base_filters)

        if date_from:
            filters.append((self.completion_field, '>=', parse_range_start(date_from)))
        if date_to:
            filters.append((self.completion_field, '<=', parse_range_end(date_to)))

        # Applied on top of the base filter, never instead of it
        if status:
            filters.append(('status', '==', status))
        if status_in:
            filters.append(('status', 'in', list(status_in)))

        return filters

    def tag(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        return {**doc, 'collectionSource': self.collection}

    async def query(self, filters: List[Tuple[str, str, Any]]) -> Tuple[bool, List[Dict[str, Any]], Optional[str]]:
        success, docs, error = await self.db.query_documents(self.collection, filters, limit=self.limit)
        if not success:
            return False, [], error
        return True, [self.tag(doc) for doc in docs], None

    async def fetch(self, request: ArchiveReportRequest) -> List[Dict[str, Any]]:
        """
        Fetch the archived records matching a report request.

        Failures are logged and yield an empty list so that one unavailable
        collection only shrinks the report.
        """
        try:
            status = request.status if request.status and request.status != 'all' else None
            filters = self.build_filters(request.date_from, request.date_to, status=status)

            success, records, error = await self.query(filters)
            if not success:
                logger.error(f"Error fetching {self.kind} archive from {self.collection}: {error}")
                return []

            logger.info(f"Fetched {len(records)} archived records from {self.collection}")
            return records

        except Exception as e:
            logger.error(f"Error fetching {self.kind} archive from {self.collection}: {str(e)}")
            return []
