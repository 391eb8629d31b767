from typing import Any, Dict, List, Optional, Tuple
import asyncio
import json
import logging

from ..core.config import settings
from ..database.collections import ARCHIVE_SOURCES
from ..database.database_service import database_service
from ..models.archive_models import AdvancedSearchParams, ArchiveSearchResult, CostBand
from .archive_dates import sort_by_completion
from .archive_fetchers import CollectionFetcher

logger = logging.getLogger(__name__)

COST_BAND_LOW_MAX = 500
COST_BAND_MEDIUM_MAX = 2000

# Added on read, not part of the stored document
UNSEARCHED_FIELDS = {'id', 'collectionSource'}


def matches_keyword(doc: Dict[str, Any], keyword: str) -> bool:
    """Case-insensitive substring match against the whole serialized stored document"""
    payload = {key: value for key, value in doc.items() if key not in UNSEARCHED_FIELDS}
    flat = json.dumps(payload, default=str, ensure_ascii=False).lower()
    return keyword.lower() in flat


def in_cost_band(cost: Any, band: CostBand) -> bool:
    if band == CostBand.ALL:
        return True
    try:
        value = float(cost) if cost is not None else 0.0
    except (TypeError, ValueError):
        value = 0.0
    if band == CostBand.LOW:
        return value < COST_BAND_LOW_MAX
    if band == CostBand.MEDIUM:
        return COST_BAND_LOW_MAX <= value < COST_BAND_MEDIUM_MAX
    return value >= COST_BAND_MEDIUM_MAX


class ArchiveSearchService:
    def __init__(self):
        self.db = database_service

    def _kinds_for(self, params: AdvancedSearchParams) -> List[str]:
        if not params.collections:
            return list(ARCHIVE_SOURCES)
        kinds = []
        for kind in params.collections:
            if kind.value not in kinds:
                kinds.append(kind.value)
        return kinds

    async def _search_source(self, kind: str, params: AdvancedSearchParams) -> Tuple[List[Dict[str, Any]], Optional[str]]:
        fetcher = CollectionFetcher(kind, self.db, limit=params.limit or settings.ARCHIVE_SEARCH_LIMIT)
        try:
            status_in = params.status[:settings.ARCHIVE_STATUS_IN_MAX] if params.status else None
            filters = fetcher.build_filters(params.date_from, params.date_to, status_in=status_in)
            success, docs, error = await fetcher.query(filters)
        except Exception as e:
            success, docs, error = False, [], str(e)

        if not success:
            logger.error(f"Archive search failed for {fetcher.collection}: {error}")
            return [], error or "Unknown error"

        keyword = params.keywords.strip() if params.keywords else ""
        matched = []
        for doc in docs:
            if keyword and not matches_keyword(doc, keyword):
                continue
            if not in_cost_band(doc.get('cost'), params.cost_band):
                continue
            matched.append({**doc, 'type': fetcher.record_type})
        return matched, None

    async def advanced_archive_search(self, params: AdvancedSearchParams) -> ArchiveSearchResult:
        """
        Search the archive sources concurrently and merge the matches.

        Waits for every source before merging. A failing source contributes
        no records and is listed in ``errors`` under its kind.
        """
        kinds = self._kinds_for(params)
        outcomes = await asyncio.gather(*(self._search_source(kind, params) for kind in kinds))

        records = []
        errors = {}
        for kind, (matched, error) in zip(kinds, outcomes):
            if error:
                errors[kind] = error
            records.extend(matched)

        records = sort_by_completion(records)
        logger.info(f"Archive search over {kinds} matched {len(records)} records ({len(errors)} source errors)")
        return ArchiveSearchResult(records=records, record_count=len(records), errors=errors)


archive_search_service = ArchiveSearchService()
