#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DailyStuff - Completion State Machine
Единственное место, где решается, в какое состояние переходит
выполнение задачи за день после действия пользователя.

Функции здесь чистые: на вход задача, текущая запись (или None)
и событие, на выход новая запись TaskCompletion. Сохранение делает
вызывающий код через репозиторий.

Версия: 1.0.0
Дата: 2026-10-19
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, Optional, Tuple, Type, Union

from dailystuff.core.calendar import format_date
from dailystuff.core.models import (
    Task,
    TaskCompletion,
    TaskState,
    TaskType,
    ValidationError
)
from dailystuff.utils.datetime_utils import now_millis

# ===== EVENTS =====

@dataclass(frozen=True)
class Tap:
    """Короткое нажатие на задачу"""
    pass

@dataclass(frozen=True)
class SetValue:
    """Явный ввод значения (минуты) из диалога"""
    value: int

Event = Union[Tap, SetValue]

class InvalidTransitionError(Exception):
    """Событие не поддерживается для данного типа задачи"""
    pass

# ===== TRANSITIONS =====

def state_for_value(value: int, target_value: int) -> TaskState:
    """Состояние по фактическому значению и цели"""
    if value >= target_value:
        return TaskState.DONE
    if value > 0:
        return TaskState.PARTIALLY_DONE
    return TaskState.NOT_DONE

def _tap_counter(task: Task, existing: Optional[TaskCompletion], event: Tap) -> Tuple[int, TaskState]:
    # без ограничения сверху, после цели остаётся DONE
    new_value = (existing.actual_value if existing else 0) + 1
    return new_value, state_for_value(new_value, task.target_value)

def _tap_timed(task: Task, existing: Optional[TaskCompletion], event: Tap) -> Tuple[int, TaskState]:
    return task.target_value, TaskState.DONE

def _set_value_timed(task: Task, existing: Optional[TaskCompletion], event: SetValue) -> Tuple[int, TaskState]:
    if isinstance(event.value, bool) or not isinstance(event.value, int) or event.value < 0:
        raise ValidationError(f"minutes must be a non-negative integer, got {event.value!r}")
    return event.value, state_for_value(event.value, task.target_value)

_Handler = Callable[[Task, Optional[TaskCompletion], Event], Tuple[int, TaskState]]

_TRANSITIONS: Dict[Tuple[TaskType, Type], _Handler] = {
    (TaskType.COUNTER, Tap): _tap_counter,
    (TaskType.TIMED, Tap): _tap_timed,
    (TaskType.TIMED, SetValue): _set_value_timed,
}

def _check_transitions(transitions) -> None:
    """Каждый тип задачи обязан обрабатывать Tap"""
    missing = [task_type.value for task_type in TaskType if (task_type, Tap) not in transitions]
    if missing:
        raise RuntimeError(f"No Tap transition for task types: {', '.join(missing)}")

_check_transitions(_TRANSITIONS)

def supports(task_type: TaskType, event_type: Type) -> bool:
    return (task_type, event_type) in _TRANSITIONS

def transition(
    task: Task,
    existing: Optional[TaskCompletion],
    event: Event,
    day: date,
    now_ms: Optional[int] = None
) -> TaskCompletion:
    """
    Вычислить новую запись о выполнении задачи за день.

    Args:
        task: задача
        existing: текущая запись за этот день или None
        event: Tap или SetValue
        day: дата записи
        now_ms: время изменения в миллисекундах (по умолчанию - сейчас)

    Returns:
        Новая запись; id сохраняется от существующей записи

    Raises:
        InvalidTransitionError: событие не поддерживается типом задачи
        ValidationError: недопустимое значение в SetValue
    """
    handler = _TRANSITIONS.get((task.type, type(event)))
    if handler is None:
        raise InvalidTransitionError(
            f"{type(event).__name__} is not supported for {task.type.value} tasks"
        )

    actual_value, state = handler(task, existing, event)

    return TaskCompletion(
        id=existing.id if existing else None,
        task_id=task.id,
        date=format_date(day),
        state=state,
        actual_value=actual_value,
        last_updated=now_millis() if now_ms is None else now_ms
    )

def default_time_entry(task: Task, existing: Optional[TaskCompletion]) -> int:
    """Значение, которым предзаполняется диалог ввода минут"""
    if existing is not None and existing.actual_value > 0:
        return existing.actual_value
    return task.target_value

__all__ = [
    'Tap',
    'SetValue',
    'Event',
    'InvalidTransitionError',
    'state_for_value',
    'supports',
    'transition',
    'default_time_entry'
]
