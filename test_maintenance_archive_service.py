import pytest
from datetime import datetime, timezone

from facility_archive.services.maintenance_archive_service import (
    MaintenanceArchiveError, MaintenanceArchiveService, ARCHIVED, PENDING, SKIPPED
)

NOW = datetime(2024, 3, 20, 12, tzinfo=timezone.utc)


def utc(year, month, day):
    return datetime(year, month, day, tzinfo=timezone.utc)


def make_service(db):
    service = MaintenanceArchiveService()
    service.db = db
    return service


def seed_tasks(db):
    db.seed('maintenance_tasks', 't-old', {'status': 'Completed', 'completedAt': utc(2024, 3, 1)})
    db.seed('maintenance_tasks', 't-new', {'status': 'Completed', 'completedAt': utc(2024, 3, 15)})
    db.seed('maintenance_tasks', 't-skip', {'status': 'Skipped', 'dueDate': utc(2024, 2, 1)})
    db.seed('maintenance_tasks', 't-done', {'status': 'Completed', 'archived': True, 'completedAt': utc(2024, 1, 1)})
    db.seed('maintenance_tasks', 't-nodate', {'status': 'Completed'})
    db.seed('maintenance_tasks', 't-open', {'status': 'Pending', 'dueDate': utc(2024, 1, 1)})


@pytest.mark.asyncio
async def test_sweep_archives_tasks_past_the_retention_window(fake_db):
    seed_tasks(fake_db)
    service = make_service(fake_db)

    result = await service.archive_completed_tasks(now=NOW)

    assert result['status'] == 'completed'
    assert result['evaluated'] == 4
    assert result[ARCHIVED] == 2
    assert result[PENDING] == 1
    assert result[SKIPPED] == 1
    assert result['failed'] == 0

    tasks = fake_db.collections['maintenance_tasks']
    assert tasks['t-old']['archived'] is True
    assert tasks['t-old']['archivedAt'] == NOW
    assert tasks['t-old']['archivedReason'] == 'Auto-archived after completion'
    assert tasks['t-skip']['archived'] is True
    assert 'archived' not in tasks['t-new']
    assert 'archived' not in tasks['t-open']


@pytest.mark.asyncio
async def test_archive_stats_are_created_then_incremented(fake_db):
    seed_tasks(fake_db)
    service = make_service(fake_db)

    await service.archive_completed_tasks(now=NOW)

    stats = fake_db.collections['system_stats']['archive_stats']
    assert stats['totalArchived'] == 2
    assert stats['daily'] == {'2024-03-20': 2}
    assert stats['lastArchived'] == NOW


@pytest.mark.asyncio
async def test_stats_failure_does_not_undo_the_archive(fake_db):
    fake_db.seed('maintenance_tasks', 't-old', {'status': 'Completed', 'completedAt': utc(2024, 3, 1)})
    fake_db.failing.add('system_stats')
    service = make_service(fake_db)

    outcome = await service.evaluate_task_for_archive(
        't-old', fake_db.collections['maintenance_tasks']['t-old'], now=NOW
    )

    assert outcome == ARCHIVED
    assert fake_db.collections['maintenance_tasks']['t-old']['archived'] is True


@pytest.mark.asyncio
async def test_update_failure_raises(fake_db):
    service = make_service(fake_db)

    with pytest.raises(MaintenanceArchiveError):
        await service.evaluate_task_for_archive('missing', {'status': 'Completed', 'completedAt': utc(2024, 1, 1)}, now=NOW)


@pytest.mark.asyncio
async def test_sweep_counts_failed_updates(fake_db, monkeypatch):
    seed_tasks(fake_db)
    service = make_service(fake_db)

    async def reject(collection, doc_id, data):
        return False, "write rejected"

    monkeypatch.setattr(fake_db, 'update_document', reject)

    result = await service.archive_completed_tasks(now=NOW)

    assert result['failed'] == 2
    assert result[ARCHIVED] == 0


@pytest.mark.asyncio
async def test_tasks_that_are_not_finished_are_skipped(fake_db):
    service = make_service(fake_db)

    assert await service.evaluate_task_for_archive('t1', {'status': 'In Progress'}, now=NOW) == SKIPPED
    assert await service.evaluate_task_for_archive('', {'status': 'Completed'}, now=NOW) == SKIPPED
    assert fake_db.collections == {}


@pytest.mark.asyncio
async def test_unreadable_task_list_raises(fake_db):
    fake_db.failing.add('maintenance_tasks')
    service = make_service(fake_db)

    with pytest.raises(MaintenanceArchiveError):
        await service.archive_completed_tasks(now=NOW)
