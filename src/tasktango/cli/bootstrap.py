# src/tasktango/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- wires concrete implementations into AppState (task store / suggestion provider / chat).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.chat import ChatSession
from ..core.ports import SuggestionProvider
from ..core.state import AppState
from ..suggestions.client import SuggestionClient
from ..suggestions.offline import OfflineSuggestionClient
from ..suggestions.runner import SuggestionRunner
from ..tasks.task_api import load_sample_tasks
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def create_suggestion_provider(settings, task_store: TaskStore | None = None) -> SuggestionProvider:
    if getattr(settings, "suggestions_offline", False):
        logger.info("Suggestions: offline demo mode.")
        return OfflineSuggestionClient(prompt_prefix=settings.suggestion_prompt_prefix, task_store=task_store)
    logger.info("Suggestions: endpoint=%s max_tokens=%s", settings.suggestion_endpoint, settings.suggestion_max_tokens)
    return SuggestionClient.from_settings(settings)


def create_initial_state(*, settings=None, runner: SuggestionRunner | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings(). The runner is attached but not started.
    """
    if settings is None:
        settings = get_settings()

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    task_store = TaskStore()
    if settings.sample_tasks:
        load_sample_tasks(task_store, count=settings.sample_task_count)

    return AppState(
        settings=settings,
        task_store=task_store,
        suggestions=create_suggestion_provider(settings, task_store),
        chat=ChatSession(),
        runner=runner,
    )
