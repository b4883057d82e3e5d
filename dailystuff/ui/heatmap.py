# ui/heatmap.py

from typing import List, Optional

from dailystuff.core.models import TaskState, TaskType
from dailystuff.services.aggregation import Week, intensity_level, weeks_for_year
from dailystuff.services.day_board import TaskWithCompletion

# Ячейки по уровню заполнения: 0 - пусто, 4 - всё выполнено
INTENSITY_CELLS = ["⬛", "🟫", "🟨", "🟩", "💚"]
OUT_OF_RANGE_CELL = "  "

STATE_ICONS = {
    TaskState.DONE: "✅",
    TaskState.PARTIALLY_DONE: "🟧",
    TaskState.NOT_DONE: "⬜️",
}

WEEKDAY_LABELS = ["Пн", "Вт", "Ср", "Чт", "Пт", "Сб", "Вс"]

def progress_bar(percent: int, length: int = 12):
    """Генерирует текстовый progress bar (emoji/блоки)"""
    done = int(length * percent // 100)
    todo = length - done
    return "🟩" * done + "⬜️" * todo + f" {percent}%"

def day_progress_message(done: int, total: int) -> str:
    percent = int((done / total) * 100) if total else 0
    return f"Прогресс: {done} из {total} задач выполнено\n" + progress_bar(percent)

def task_line(index: int, entry: TaskWithCompletion) -> str:
    task = entry.task
    unit = "мин" if task.type == TaskType.TIMED else "раз"
    return (
        f"{index}. {STATE_ICONS[entry.state]} {task.name} "
        f"[{entry.actual_value}/{task.target_value} {unit}] (id {task.id})"
    )

def day_board_message(day_label: str, entries: List[TaskWithCompletion]) -> str:
    if not entries:
        return f"{day_label}: на этот день задач нет."
    lines = [task_line(idx, entry) for idx, entry in enumerate(entries, 1)]
    return f"📅 {day_label}\n" + "\n".join(lines)

def render_heatmap(weeks: List[Week], year: Optional[int] = None) -> str:
    """
    Тепловая карта в стиле GitHub: строки - дни недели,
    столбцы - недели. Дни вне диапазона остаются пустыми.
    """
    if year is not None:
        weeks = weeks_for_year(weeks, year)
    if not weeks:
        return "Нет данных для графика."

    rows = []
    for weekday in range(7):
        cells = []
        for week in weeks:
            day = week[weekday]
            if not day.in_range or (year is not None and day.date.year != year):
                cells.append(OUT_OF_RANGE_CELL)
            else:
                cells.append(INTENSITY_CELLS[intensity_level(day.percentage)])
        rows.append(f"{WEEKDAY_LABELS[weekday]} " + "".join(cells))

    header = f"📊 {year}" if year is not None else "📊 Активность"
    return header + "\n" + "\n".join(rows)
