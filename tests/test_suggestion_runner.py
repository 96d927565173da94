# tests/test_suggestion_runner.py

from __future__ import annotations

import httpx
import pytest

from tasktango.core.state import SUGGESTION_PLACEHOLDER, AppState
from tasktango.suggestions.client import SuggestionClient, SuggestionError, SuggestionResult
from tasktango.suggestions.runner import (
    SuggestionRunner,
    cancel_pending,
    is_suggestion_pending,
    is_suggestion_stale,
    refresh_suggestion,
    request_suggestions,
)

from .fakes import BlockingSuggestionProvider, ExplodingSuggestionProvider, FakeSuggestionProvider


@pytest.mark.asyncio
async def test_refresh_sends_summary_prompt_and_applies(state: AppState, provider: FakeSuggestionProvider) -> None:
    state.task_store.add("Buy milk")
    state.task_store.add("Call bank")
    provider.result = SuggestionResult.success("Group by urgency")

    result = await refresh_suggestion(state)

    assert result.ok
    assert provider.calls == [
        ("Categorize these tasks: Buy milk, Call bank", "http://suggest.test/llama", 100)
    ]
    assert state.suggestion_text == "Group by urgency"
    assert state.suggestion_revision == state.task_store.revision
    assert state.last_suggestion_error is None
    assert not is_suggestion_stale(state)

    state.task_store.add("Write report")
    assert is_suggestion_stale(state)


@pytest.mark.asyncio
async def test_failure_keeps_previous_text(state: AppState, provider: FakeSuggestionProvider) -> None:
    provider.result = SuggestionResult.success("first")
    await refresh_suggestion(state)

    provider.result = SuggestionResult.failure(SuggestionError.HTTP_STATUS, "HTTP 500")
    result = await refresh_suggestion(state)

    assert not result.ok
    assert state.suggestion_text == "first"
    assert state.last_suggestion_error == SuggestionError.HTTP_STATUS


@pytest.mark.asyncio
async def test_failure_before_any_success_keeps_placeholder(state: AppState, provider: FakeSuggestionProvider) -> None:
    provider.result = SuggestionResult.failure(SuggestionError.DECODE_FAILURE)

    await refresh_suggestion(state)

    assert state.suggestion_text == SUGGESTION_PLACEHOLDER
    assert state.suggestion_revision is None
    assert not is_suggestion_stale(state)


@pytest.mark.asyncio
async def test_result_after_clear_overwrites_text_without_touching_store(state: AppState) -> None:
    class ClearingProvider:
        async def request_suggestion(self, prompt, endpoint=None, max_tokens=None):
            state.task_store.clear()
            return SuggestionResult.success("late news")

    state.task_store.add("a")
    state.suggestions = ClearingProvider()

    await refresh_suggestion(state)

    assert state.task_store.count_tasks() == 0
    assert state.suggestion_text == "late news"
    assert is_suggestion_stale(state)


@pytest.mark.asyncio
async def test_provider_crash_degrades_to_failure(state: AppState) -> None:
    state.suggestions = ExplodingSuggestionProvider()

    result = await refresh_suggestion(state)

    assert result.error == SuggestionError.NETWORK_FAILURE
    assert state.suggestion_text == SUGGESTION_PLACEHOLDER


def test_request_suggestions_on_background_loop(running_state: AppState, provider: FakeSuggestionProvider) -> None:
    running_state.task_store.add("Buy milk")
    provider.result = SuggestionResult.success("Group by urgency")

    fut = request_suggestions(running_state)
    result = fut.result(timeout=5.0)

    assert result.text == "Group by urgency"
    assert running_state.suggestion_text == "Group by urgency"
    assert not is_suggestion_pending(running_state)


def test_new_request_supersedes_pending_one(running_state: AppState) -> None:
    running_state.suggestions = BlockingSuggestionProvider()
    first = request_suggestions(running_state)
    assert is_suggestion_pending(running_state)

    fast = FakeSuggestionProvider(SuggestionResult.success("fresh"))
    running_state.suggestions = fast
    second = request_suggestions(running_state)

    assert first.cancelled()
    assert second.result(timeout=5.0).text == "fresh"
    assert running_state.suggestion_text == "fresh"


def test_cancel_pending_leaves_text_untouched(running_state: AppState) -> None:
    running_state.suggestion_text = "kept"
    running_state.suggestions = BlockingSuggestionProvider()

    fut = request_suggestions(running_state)

    assert cancel_pending(running_state) is True
    assert fut.cancelled()
    assert running_state.suggestion_text == "kept"
    assert running_state.last_suggestion_error == SuggestionError.CANCELLED
    assert cancel_pending(running_state) is False


def test_request_without_runner_raises(state: AppState) -> None:
    with pytest.raises(RuntimeError):
        request_suggestions(state)


def test_runner_lifecycle() -> None:
    runner = SuggestionRunner(name="lifecycle")
    assert not runner.is_running

    runner.start()
    assert runner.is_running

    async def answer() -> int:
        return 42

    assert runner.submit(answer()).result(timeout=5.0) == 42

    runner.stop(timeout=5.0)
    assert not runner.is_running

    coro = answer()
    with pytest.raises(RuntimeError):
        runner.submit(coro)


@pytest.mark.asyncio
async def test_http_failures_keep_last_good_suggestion(state: AppState) -> None:
    responses = iter(
        [
            httpx.Response(200, json={"choices": [{"text": "Group by urgency"}]}),
            httpx.Response(500, json={"error": "boom"}),
            httpx.Response(200, content=b"<html>"),
        ]
    )

    def handler(request: httpx.Request) -> httpx.Response:
        return next(responses)

    state.suggestions = SuggestionClient(
        "http://suggest.test/llama", 100, transport=httpx.MockTransport(handler)
    )
    state.task_store.add("Buy milk")

    first = await refresh_suggestion(state)
    assert first.ok
    assert state.suggestion_text == "Group by urgency"

    server_error = await refresh_suggestion(state)
    assert server_error.error == SuggestionError.HTTP_STATUS
    assert state.suggestion_text == "Group by urgency"

    not_json = await refresh_suggestion(state)
    assert not_json.error == SuggestionError.DECODE_FAILURE
    assert state.suggestion_text == "Group by urgency"
    assert state.last_suggestion_error == SuggestionError.DECODE_FAILURE
