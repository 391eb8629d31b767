import pytest
from datetime import datetime, timezone

from facility_archive.models.archive_models import AdvancedSearchParams, CostBand
from facility_archive.services.archive_search_service import (
    ArchiveSearchService, in_cost_band, matches_keyword
)


def utc(year, month, day):
    return datetime(year, month, day, tzinfo=timezone.utc)


def seed_search(db):
    db.seed('maintenance_tasks', 'mt-1', {'taskDescription': 'Replace PUMP seal', 'archived': True,
                                          'status': 'Completed', 'completedAt': utc(2024, 3, 1), 'cost': 300})
    db.seed('work_orders', 'wo-1', {'title': 'Service boiler', 'notes': 'checked pump pressure',
                                    'status': 'Completed', 'completedAt': utc(2024, 2, 1), 'cost': 1500})
    db.seed('work_orders', 'wo-2', {'title': 'Paint hall', 'status': 'Closed',
                                    'completedAt': utc(2024, 4, 1), 'cost': 2500})
    db.seed('issue_logs', 'is-1', {'issueDescription': 'Roof leak', 'status': 'Resolved',
                                   'resolutionDate': utc(2024, 1, 5)})
    db.seed('inspection_records', 'in-1', {'title': 'Pump room inspection', 'status': 'Completed',
                                           'completedAt': utc(2024, 5, 1), 'cost': 'unknown'})


def make_service(db):
    service = ArchiveSearchService()
    service.db = db
    return service


@pytest.mark.asyncio
async def test_keyword_matches_any_field_case_insensitively(fake_db):
    seed_search(fake_db)
    service = make_service(fake_db)

    result = await service.advanced_archive_search(AdvancedSearchParams(keywords="pump"))

    assert [r['id'] for r in result.records] == ['in-1', 'mt-1', 'wo-1']
    assert result.record_count == 3
    assert result.errors == {}


@pytest.mark.asyncio
async def test_records_are_tagged_with_their_type(fake_db):
    seed_search(fake_db)
    service = make_service(fake_db)

    result = await service.advanced_archive_search(AdvancedSearchParams())

    types = {r['id']: r['type'] for r in result.records}
    assert types == {
        'mt-1': 'maintenance',
        'wo-1': 'work_order',
        'wo-2': 'work_order',
        'is-1': 'issue',
        'in-1': 'inspection',
    }


@pytest.mark.asyncio
async def test_default_and_explicit_limits(fake_db):
    service = make_service(fake_db)

    await service.advanced_archive_search(AdvancedSearchParams())
    assert {call['limit'] for call in fake_db.query_calls} == {500}

    fake_db.query_calls.clear()
    await service.advanced_archive_search(AdvancedSearchParams(limit=25))
    assert {call['limit'] for call in fake_db.query_calls} == {25}


@pytest.mark.asyncio
async def test_status_list_is_capped(fake_db):
    service = make_service(fake_db)
    statuses = [f"S{i}" for i in range(14)]

    await service.advanced_archive_search(AdvancedSearchParams(collections=["work_orders"], status=statuses))

    filters = fake_db.query_calls[0]['filters']
    assert ('status', 'in', statuses[:10]) in filters


@pytest.mark.asyncio
async def test_collection_subset_only_queries_those_sources(fake_db):
    seed_search(fake_db)
    service = make_service(fake_db)

    result = await service.advanced_archive_search(
        AdvancedSearchParams(collections=["issues", "issues", "work_orders"])
    )

    assert [call['collection'] for call in fake_db.query_calls] == ['issue_logs', 'work_orders']
    assert {r['type'] for r in result.records} == {'issue', 'work_order'}


@pytest.mark.asyncio
async def test_failing_source_is_reported_and_others_returned(fake_db):
    seed_search(fake_db)
    fake_db.failing.add('work_orders')
    service = make_service(fake_db)

    result = await service.advanced_archive_search(AdvancedSearchParams())

    assert result.errors == {'work_orders': 'work_orders unavailable'}
    assert {r['id'] for r in result.records} == {'mt-1', 'is-1', 'in-1'}


@pytest.mark.asyncio
async def test_cost_band_filter(fake_db):
    seed_search(fake_db)
    service = make_service(fake_db)

    high = await service.advanced_archive_search(AdvancedSearchParams(costBand="high"))
    medium = await service.advanced_archive_search(AdvancedSearchParams(costBand="medium"))

    assert [r['id'] for r in high.records] == ['wo-2']
    assert [r['id'] for r in medium.records] == ['wo-1']


@pytest.mark.asyncio
async def test_date_range_uses_each_completion_field(fake_db):
    seed_search(fake_db)
    service = make_service(fake_db)

    result = await service.advanced_archive_search(
        AdvancedSearchParams(dateFrom="2024-01-01", dateTo="2024-02-29")
    )

    assert [r['id'] for r in result.records] == ['wo-1', 'is-1']


def test_matches_keyword_ignores_document_id():
    assert matches_keyword({'id': 'pump-1', 'title': 'Door'}, 'pump') is False
    assert matches_keyword({'title': 'Door', 'tags': ['Pump']}, 'PUMP') is True


def test_cost_band_boundaries():
    assert in_cost_band(499.99, CostBand.LOW)
    assert in_cost_band(None, CostBand.LOW)
    assert in_cost_band('not a number', CostBand.LOW)
    assert in_cost_band(500, CostBand.MEDIUM)
    assert not in_cost_band(2000, CostBand.MEDIUM)
    assert in_cost_band(2000, CostBand.HIGH)
    assert in_cost_band(10 ** 6, CostBand.ALL)


def test_limit_must_be_positive():
    with pytest.raises(Exception):
        AdvancedSearchParams(limit=0)


@pytest.mark.asyncio
async def test_keyword_does_not_match_source_tags(fake_db):
    fake_db.seed('work_orders', 'wo-1', {'title': 'Paint hall', 'status': 'Closed', 'completedAt': utc(2024, 4, 1)})
    fake_db.seed('issue_logs', 'is-1', {'issueDescription': 'Roof leak', 'status': 'Resolved',
                                        'resolutionDate': utc(2024, 1, 5)})
    service = make_service(fake_db)

    orders = await service.advanced_archive_search(AdvancedSearchParams(keywords="orders"))
    issues = await service.advanced_archive_search(AdvancedSearchParams(keywords="issue_logs"))

    assert orders.records == []
    assert issues.records == []


def test_matches_keyword_ignores_collection_source():
    doc = {'id': 'wo-1', 'collectionSource': 'work_orders', 'title': 'Paint hall'}

    assert matches_keyword(doc, 'work_orders') is False
    assert matches_keyword(doc, 'paint') is True
