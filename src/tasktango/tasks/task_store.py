# src/tasktango/tasks/task_store.py

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from datetime import date

from .task_models import Task, TaskCategory

logger = logging.getLogger(__name__)

SUMMARY_SEPARATOR = ", "


class TaskStore:
    """
    In-memory ordered task list.

    - insertion order is preserved; removal never reorders the remaining tasks
    - there is no update-in-place: tasks are frozen once added
    - `revision` grows on every mutation so async results can tell whether the
      list changed since they were requested

    Thread-safety:
    - every method takes the same RLock (console thread + suggestion loop thread)
    """

    def __init__(self, tasks: Iterable[Task] | None = None) -> None:
        self._lock = threading.RLock()
        self._tasks: list[Task] = list(tasks or [])
        self._revision = 0
        logger.info("TaskStore ready total=%s", len(self._tasks))

    def __len__(self) -> int:
        return self.count_tasks()

    @property
    def revision(self) -> int:
        with self._lock:
            return self._revision

    # ---- public API ----

    def count_tasks(self) -> int:
        with self._lock:
            return len(self._tasks)

    def list_tasks(self) -> list[Task]:
        with self._lock:
            return list(self._tasks)

    def get(self, index: int) -> Task | None:
        with self._lock:
            if 0 <= index < len(self._tasks):
                return self._tasks[index]
            return None

    def add(
        self,
        title: str,
        category: TaskCategory | str | None = TaskCategory.WORK,
        due_date: date | None = None,
    ) -> Task | None:
        """
        Append a new task and return it.

        Returns None (and stores nothing) when the title is empty after trimming.
        An unknown category name raises ValueError before anything is stored.
        """
        clean = (title or "").strip()
        if not clean:
            logger.debug("Rejected task with empty title.")
            return None

        task = Task(
            title=clean,
            category=TaskCategory.parse(category),
            due_date=due_date or date.today(),
        )

        with self._lock:
            self._tasks.append(task)
            self._revision += 1
            total = len(self._tasks)

        logger.debug(
            "Task added id=%s category=%s due=%s total=%s",
            task.id,
            task.category.value,
            task.due_date.isoformat(),
            total,
        )
        return task

    def remove_at(self, indices: Iterable[int]) -> list[Task]:
        """
        Remove tasks at the given positions of the current ordering.

        Out-of-range positions (negative included) are ignored.
        Returns the removed tasks in their original order.
        """
        wanted = {int(i) for i in indices}

        with self._lock:
            valid = {i for i in wanted if 0 <= i < len(self._tasks)}
            if not valid:
                if wanted:
                    logger.debug("remove_at: no valid positions in %s", sorted(wanted))
                return []

            removed = [t for i, t in enumerate(self._tasks) if i in valid]
            self._tasks = [t for i, t in enumerate(self._tasks) if i not in valid]
            self._revision += 1
            total = len(self._tasks)

        logger.debug("Tasks removed positions=%s total=%s", sorted(valid), total)
        return removed

    def clear(self) -> int:
        with self._lock:
            n = len(self._tasks)
            if n:
                self._tasks = []
                self._revision += 1
        if n:
            logger.debug("Tasks cleared count=%s", n)
        return n

    def summary(self, separator: str = SUMMARY_SEPARATOR) -> str:
        """All titles in store order joined by ", " (empty store -> "")."""
        with self._lock:
            return separator.join(t.title for t in self._tasks)
