# services/task_service.py

import logging
from typing import Iterable, List, Optional, Union

from dailystuff.core.calendar import Weekday, parse_days_string
from dailystuff.core.models import (
    Task,
    TaskType,
    ValidationError,
    validate_days,
    validate_name,
    validate_target
)
from dailystuff.core.repository import TaskRepository

logger = logging.getLogger(__name__)

DaysInput = Union[str, Iterable[Weekday]]

def _normalize_days(days: DaysInput) -> List[Weekday]:
    if isinstance(days, str):
        return parse_days_string(days)
    return validate_days(days)

def _task_type(value: Union[TaskType, str]) -> TaskType:
    try:
        return TaskType(value)
    except ValueError:
        raise ValidationError(f"неизвестный тип задачи: {value!r}")

class TaskService:
    """
    Создание и редактирование задач

    Здесь проверяются введённые пользователем данные (название,
    цель, дни недели) до того, как они попадут в репозиторий.
    """

    def __init__(self, repository: TaskRepository):
        self.repository = repository

    async def create_task(
        self,
        name: str,
        task_type: Union[TaskType, str],
        target_value: int,
        days: DaysInput
    ) -> Task:
        """Создать новую задачу"""
        task = Task(
            name=validate_name(name),
            type=_task_type(task_type),
            target_value=validate_target(target_value),
            valid_days=validate_days(_normalize_days(days))
        )

        created = await self.repository.insert_task(task)
        logger.info(f"✅ Created task {created.id} ({created.type.value}): {created.name}")
        return created

    async def update_task(
        self,
        task_id: int,
        name: Optional[str] = None,
        task_type: Optional[Union[TaskType, str]] = None,
        target_value: Optional[int] = None,
        days: Optional[DaysInput] = None
    ) -> Optional[Task]:
        """Обновить задачу; None если задача не найдена"""
        task = await self.repository.get_task(task_id)
        if task is None:
            return None

        updated = task.copy(
            name=task.name if name is None else name,
            type=task.type if task_type is None else _task_type(task_type),
            target_value=task.target_value if target_value is None else target_value,
            valid_days=task.valid_days if days is None else _normalize_days(days)
        ).validate()

        if not await self.repository.update_task(updated):
            return None

        logger.info(f"✅ Updated task {task_id}")
        return updated

    async def delete_task(self, task_id: int) -> bool:
        """Удалить задачу вместе с историей выполнения"""
        task = await self.repository.get_task(task_id)
        if task is None:
            return False

        await self.repository.delete_task(task)
        logger.info(f"🗑️ Deleted task {task_id}")
        return True

    async def list_tasks(self) -> List[Task]:
        return await self.repository.get_all_tasks()

__all__ = ['TaskService']
