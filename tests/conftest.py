# tests/conftest.py

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from types import SimpleNamespace

import pytest

from tasktango.core.state import AppState
from tasktango.suggestions.runner import SuggestionRunner
from tasktango.tasks.task_store import TaskStore

from .fakes import FakeSuggestionProvider


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="tasktango-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        console_enabled=False,
        suggestion_endpoint="http://suggest.test/llama",
        suggestion_max_tokens=100,
        suggestion_prompt_prefix="Categorize these tasks: ",
        suggestions_offline=False,
        sample_tasks=False,
        sample_task_count=10,
        chat_reply_delay_seconds=0.0,
    )


@pytest.fixture()
def provider() -> FakeSuggestionProvider:
    return FakeSuggestionProvider()


@pytest.fixture()
def state(settings: SimpleNamespace, provider: FakeSuggestionProvider) -> AppState:
    """AppState wired with a real in-memory TaskStore and a fake provider (no runner)."""
    return AppState(
        settings=settings,
        task_store=TaskStore(),
        suggestions=provider,
    )


@pytest.fixture()
def runner() -> Iterator[SuggestionRunner]:
    r = SuggestionRunner(name="tasktango-test-loop").start()
    try:
        yield r
    finally:
        r.stop(timeout=5.0)


@pytest.fixture()
def running_state(state: AppState, runner: SuggestionRunner) -> AppState:
    state.runner = runner
    return state
