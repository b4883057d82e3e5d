import pytest

from dailystuff.core.calendar import Weekday
from dailystuff.core.models import (
    Task,
    TaskCompletion,
    TaskState,
    TaskType,
    ValidationError
)
from tests.conftest import MONDAY, TUESDAY

def test_task_normalizes_days_from_string():
    task = Task(name="Walk", type="COUNTER", target_value=1, valid_days="FRIDAY, MONDAY")
    assert task.type == TaskType.COUNTER
    assert task.valid_days == [Weekday.MONDAY, Weekday.FRIDAY]
    assert task.valid_days_string == "MONDAY,FRIDAY"

def test_task_accepts_mixed_day_list():
    task = Task(name="Walk", type=TaskType.COUNTER, target_value=1, valid_days=["SUNDAY", Weekday.MONDAY])
    assert task.valid_days == [Weekday.MONDAY, Weekday.SUNDAY]

def test_task_is_active_only_on_its_days(pushups):
    assert pushups.is_active_on(MONDAY)
    assert not pushups.is_active_on(TUESDAY)

def test_task_without_days_is_never_active():
    task = Task(name="Never", type=TaskType.COUNTER, target_value=1, valid_days="")
    assert not task.is_active_on(MONDAY)
    assert not task.is_active_on(TUESDAY)

@pytest.mark.parametrize("changes", [
    {"name": "   "},
    {"target_value": 0},
    {"target_value": -5},
    {"target_value": True},
    {"valid_days": []},
])
def test_task_validate_rejects_bad_fields(pushups, changes):
    with pytest.raises(ValidationError):
        pushups.copy(**changes).validate()

def test_task_validate_strips_name():
    task = Task(name="  Read  ", type=TaskType.TIMED, target_value=30, valid_days="MONDAY").validate()
    assert task.name == "Read"

def test_task_dict_uses_backup_field_names(pushups):
    data = pushups.copy(id=7, created_at=1700000000000).to_dict()
    assert data == {
        'id': 7,
        'name': "Pushups",
        'type': "COUNTER",
        'targetValue': 3,
        'validDays': "MONDAY,WEDNESDAY",
        'createdAt': 1700000000000
    }
    assert Task.from_dict(data) == pushups.copy(id=7, created_at=1700000000000)

def test_completion_dict_and_key():
    completion = TaskCompletion(
        id=3, task_id=7, date="2024-01-01", state="DONE", actual_value=3, last_updated=42
    )
    assert completion.state == TaskState.DONE
    assert completion.key == (7, "2024-01-01")
    assert completion.completion_date == MONDAY
    assert completion.to_dict() == {
        'id': 3,
        'taskId': 7,
        'date': "2024-01-01",
        'state': "DONE",
        'actualValue': 3,
        'lastUpdated': 42
    }
    assert TaskCompletion.from_dict(completion.to_dict()) == completion
