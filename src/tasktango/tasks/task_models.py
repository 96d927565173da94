# src/tasktango/tasks/task_models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum


class TaskCategory(StrEnum):
    """
    Fixed set of task categories.

    Notes:
    - values are the display names shown in the task list
    - WORK is the default for new tasks
    """

    WORK = "Work"
    PERSONAL = "Personal"
    URGENT = "Urgent"
    LONG_TERM = "Long-Term"
    MISC = "Misc"

    @classmethod
    def parse(cls, raw: str | TaskCategory | None) -> TaskCategory:
        if raw is None:
            return cls.WORK
        if isinstance(raw, TaskCategory):
            return raw
        key = "".join(ch for ch in str(raw).lower() if ch.isalnum())
        if not key:
            return cls.WORK
        for member in cls:
            if "".join(ch for ch in member.value.lower() if ch.isalnum()) == key:
                return member
        raise ValueError(f"Unknown category: {raw!r}")


def _new_task_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True, slots=True)
class Task:
    title: str
    category: TaskCategory = TaskCategory.WORK
    due_date: date = field(default_factory=date.today)
    id: str = field(default_factory=_new_task_id)
