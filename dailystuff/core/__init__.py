#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DailyStuff - Core Package
Календарь, модели, машина состояний выполнения и хранилище
"""

from .calendar import (
    Weekday,
    ALL_DAYS,
    DATE_FORMAT,
    parse_days_string,
    days_to_string,
    from_weekday,
    weekday_of,
    format_date,
    parse_date
)

from .models import (
    TaskType,
    TaskState,
    Task,
    TaskCompletion,
    ValidationError
)

from .state_machine import (
    Tap,
    SetValue,
    InvalidTransitionError,
    state_for_value,
    transition
)

__all__ = [
    # Calendar
    'Weekday',
    'ALL_DAYS',
    'DATE_FORMAT',
    'parse_days_string',
    'days_to_string',
    'from_weekday',
    'weekday_of',
    'format_date',
    'parse_date',

    # Models
    'TaskType',
    'TaskState',
    'Task',
    'TaskCompletion',
    'ValidationError',

    # State machine
    'Tap',
    'SetValue',
    'InvalidTransitionError',
    'state_for_value',
    'transition'
]
