from datetime import date

import pytest

from dailystuff.core.database import StorageConnectionError, DatabaseManager, tasks_table
from dailystuff.core.models import Task, TaskCompletion, TaskState, TaskType
from tests.conftest import MONDAY, TUESDAY, WEDNESDAY

def completion(task_id, day, state=TaskState.DONE, value=1, updated=1):
    return TaskCompletion(
        task_id=task_id, date=day, state=state, actual_value=value, last_updated=updated
    )

async def test_insert_assigns_id_and_lists_newest_first(repository, pushups, reading):
    first = await repository.insert_task(pushups.copy(created_at=1000))
    second = await repository.insert_task(reading.copy(created_at=2000))

    assert first.id is not None and second.id is not None
    tasks = await repository.get_all_tasks()
    assert [task.id for task in tasks] == [second.id, first.id]
    assert await repository.get_task(first.id) == first

async def test_update_task_in_place(repository, pushups):
    task = await repository.insert_task(pushups)
    assert await repository.update_task(task.copy(name="Squats", target_value=5))

    stored = await repository.get_task(task.id)
    assert stored.name == "Squats"
    assert stored.target_value == 5

async def test_update_missing_task_returns_false(repository, pushups):
    assert not await repository.update_task(pushups.copy(id=999))

async def test_tasks_active_on_filters_by_weekday(repository, pushups, reading):
    counter = await repository.insert_task(pushups)
    timed = await repository.insert_task(reading)

    monday_ids = {task.id for task in await repository.tasks_active_on(MONDAY)}
    wednesday_ids = {task.id for task in await repository.tasks_active_on(WEDNESDAY)}

    assert monday_ids == {counter.id, timed.id}
    assert wednesday_ids == {counter.id}
    assert await repository.tasks_active_on(TUESDAY) == []

async def test_task_with_empty_days_is_never_active(repository):
    await repository.insert_task(Task(name="Nothing", type=TaskType.COUNTER, target_value=1, valid_days=""))
    for offset in range(7):
        assert await repository.tasks_active_on(date(2024, 1, 1 + offset)) == []

async def test_substring_match_is_rechecked_after_parsing(repository, database):
    async with database.engine.begin() as conn:
        await conn.execute(tasks_table.insert().values(
            name="Broken", type="COUNTER", target_value=1,
            valid_days="XMONDAY,monday", created_at=1
        ))

    assert await repository.tasks_active_on(MONDAY) == []

async def test_upsert_is_keyed_by_task_and_date(repository, pushups):
    task = await repository.insert_task(pushups)

    first = await repository.upsert_completion(
        completion(task.id, "2024-01-01", TaskState.PARTIALLY_DONE, 1, updated=10)
    )
    second = await repository.upsert_completion(
        completion(task.id, "2024-01-01", TaskState.DONE, 3, updated=20)
    )

    assert first.id == second.id
    stored = await repository.completion_for(task.id, MONDAY)
    assert stored.state == TaskState.DONE
    assert stored.actual_value == 3
    assert stored.last_updated == 20
    assert len(await repository.completions_for_date(MONDAY)) == 1

async def test_upsert_same_record_twice_is_idempotent(repository, pushups):
    task = await repository.insert_task(pushups)
    record = completion(task.id, "2024-01-01", TaskState.DONE, 3, updated=5)

    await repository.upsert_completion(record)
    await repository.upsert_completion(record)

    assert len(await repository.all_completions()) == 1

async def test_completions_in_range_is_inclusive_and_ordered(repository, pushups, reading):
    counter = await repository.insert_task(pushups)
    timed = await repository.insert_task(reading)

    await repository.upsert_completion(completion(counter.id, "2024-01-03"))
    await repository.upsert_completion(completion(timed.id, "2024-01-01"))
    await repository.upsert_completion(completion(counter.id, "2024-01-01"))
    await repository.upsert_completion(completion(counter.id, "2024-01-08"))

    records = await repository.completions_in_range(MONDAY, WEDNESDAY)
    assert [record.date for record in records] == ["2024-01-01", "2024-01-01", "2024-01-03"]

    for_task = await repository.completions_for_task_in_range(counter.id, MONDAY, date(2024, 1, 31))
    assert [record.date for record in for_task] == ["2024-01-01", "2024-01-03", "2024-01-08"]

async def test_delete_task_removes_its_completions(repository, pushups, reading):
    counter = await repository.insert_task(pushups)
    timed = await repository.insert_task(reading)
    await repository.upsert_completion(completion(counter.id, "2024-01-01"))
    await repository.upsert_completion(completion(counter.id, "2024-01-03"))
    await repository.upsert_completion(completion(timed.id, "2024-01-01"))

    await repository.delete_task(counter)

    assert await repository.get_task(counter.id) is None
    remaining = await repository.all_completions()
    assert [record.task_id for record in remaining] == [timed.id]

async def test_reset_day_only_touches_that_date(repository, pushups):
    task = await repository.insert_task(pushups)
    await repository.upsert_completion(completion(task.id, "2024-01-01"))
    await repository.upsert_completion(completion(task.id, "2024-01-03"))

    removed = await repository.reset_day(MONDAY)

    assert removed == 1
    assert await repository.completions_for_date(MONDAY) == []
    assert len(await repository.completions_for_date(WEDNESDAY)) == 1

async def test_observers_receive_full_task_list(repository, pushups, reading):
    received = []

    async def async_observer(tasks):
        received.append(("async", [task.name for task in tasks]))

    def failing_observer(tasks):
        raise RuntimeError("boom")

    repository.subscribe(lambda tasks: received.append(("sync", len(tasks))))
    repository.subscribe(failing_observer)
    repository.subscribe(async_observer)

    first = await repository.insert_task(pushups.copy(created_at=1))
    await repository.insert_task(reading.copy(created_at=2))
    await repository.delete_task(first)

    assert received == [
        ("sync", 1), ("async", ["Pushups"]),
        ("sync", 2), ("async", ["Read", "Pushups"]),
        ("sync", 1), ("async", ["Read"]),
    ]

async def test_unsubscribed_observer_is_not_called(repository, pushups):
    calls = []

    def observer(tasks):
        calls.append(tasks)

    repository.subscribe(observer)
    repository.unsubscribe(observer)
    await repository.insert_task(pushups)

    assert calls == []

async def test_engine_access_before_initialize_fails():
    manager = DatabaseManager("sqlite+aiosqlite:///:memory:")
    with pytest.raises(StorageConnectionError):
        manager.engine

async def test_health_check(database):
    assert (await database.health_check())["status"] == "healthy"
