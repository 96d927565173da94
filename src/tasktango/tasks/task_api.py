# src/tasktango/tasks/task_api.py

from __future__ import annotations

import logging
import random
import re
from datetime import date, timedelta

from ..config import DEFAULT_SUGGESTION_PROMPT_PREFIX
from .task_models import TaskCategory
from .task_store import TaskStore

logger = logging.getLogger(__name__)

_RELATIVE_DAYS_RE = re.compile(r"^\+(\d{1,4})d?$")


def build_suggestion_prompt(store: TaskStore, prefix: str = DEFAULT_SUGGESTION_PROMPT_PREFIX) -> str:
    """Prompt sent to the suggestion endpoint: prefix + current task summary."""
    return f"{prefix}{store.summary()}"


def load_sample_tasks(store: TaskStore, count: int = 10, rng: random.Random | None = None) -> int:
    """
    Seed "Sample Task 1..N" with random categories, due today.

    Only seeds an empty store, so it is safe to call on every startup.
    """
    if count <= 0 or store.count_tasks() > 0:
        return 0

    rng = rng or random.Random()
    categories = list(TaskCategory)
    today = date.today()

    added = 0
    for i in range(1, count + 1):
        if store.add(f"Sample Task {i}", rng.choice(categories), today) is not None:
            added += 1

    logger.info("Loaded %d sample tasks.", added)
    return added


def parse_due_date(raw: str | None, *, today: date | None = None) -> date:
    """
    Parse a due date typed by the user.

    Accepted forms:
    - YYYY-MM-DD
    - "today" / "tomorrow"
    - "+N" or "+Nd" (N days from today)
    """
    today = today or date.today()
    s = (raw or "").strip().lower()
    if not s or s == "today":
        return today
    if s == "tomorrow":
        return today + timedelta(days=1)

    m = _RELATIVE_DAYS_RE.match(s)
    if m:
        return today + timedelta(days=int(m.group(1)))

    try:
        return date.fromisoformat(s)
    except ValueError:
        raise ValueError(f"Invalid due date: {raw!r} (use YYYY-MM-DD, today, tomorrow or +N)") from None
