# tests/test_commands.py

from __future__ import annotations

from datetime import date, timedelta

from tasktango.cli.commands import CommandRegistry, registry
from tasktango.core.state import AppState
from tasktango.suggestions.client import SuggestionResult
from tasktango.tasks.task_models import TaskCategory

from .fakes import FakeSuggestionProvider


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b", aliases=["bee"])

    notes: list[str] = []
    assert reg.handle(state, "/a x") == "h2"
    assert reg.handle(state, "/bee y", emit=notes.append) == "h3"
    assert called == {"h2": 1, "h3": 1}
    assert notes == ["note"]


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_add_with_category_and_due(state: AppState) -> None:
    reply = registry.handle(state, "/add Pay rent #personal @tomorrow")

    assert reply is not None and reply.startswith("Added: Pay rent [Personal]")
    task = state.task_store.list_tasks()[0]
    assert task.title == "Pay rent"
    assert task.category is TaskCategory.PERSONAL
    assert task.due_date == date.today() + timedelta(days=1)


def test_add_rejects_empty_title_and_bad_input(state: AppState) -> None:
    assert "must not be empty" in (registry.handle(state, "/add #urgent") or "")
    assert "Unknown category" in (registry.handle(state, "/add x #hobby") or "")
    assert "Invalid due date" in (registry.handle(state, "/add x @someday") or "")
    assert state.task_store.count_tasks() == 0


def test_add_keeps_hash_words_inside_title(state: AppState) -> None:
    reply = registry.handle(state, "/add Fix #42 crash")

    assert reply is not None and reply.startswith("Added: Fix #42 crash [Work]")
    assert state.task_store.list_tasks()[0].title == "Fix #42 crash"


def test_add_options_before_separator(state: AppState) -> None:
    registry.handle(state, "/add #urgent @tomorrow -- Fix #42 @home")

    task = state.task_store.list_tasks()[0]
    assert task.title == "Fix #42 @home"
    assert task.category is TaskCategory.URGENT
    assert task.due_date == date.today() + timedelta(days=1)

    reply = registry.handle(state, "/add oops -- title")
    assert reply is not None and "before --" in reply
    assert state.task_store.count_tasks() == 1



def test_list_rm_and_summary(state: AppState) -> None:
    for title in ("Buy milk", "Call bank", "Write report"):
        state.task_store.add(title)

    listing = registry.handle(state, "/list") or ""
    assert "1. Buy milk" in listing and "3. Write report" in listing

    assert registry.handle(state, "/rm 1,3") == "Removed: Buy milk, Write report"
    assert registry.handle(state, "/summary") == "Call bank"
    assert "out of range" in (registry.handle(state, "/rm 9") or "")
    assert "Not a position" in (registry.handle(state, "/rm one") or "")


def test_clear_and_sample(state: AppState) -> None:
    state.task_store.add("a")
    assert registry.handle(state, "/sample") == "Sample tasks are only loaded into an empty list."
    assert registry.handle(state, "/clear") == "Cleared 1 task(s)."
    assert registry.handle(state, "/summary") == "(no tasks)"
    assert registry.handle(state, "/sample 3") == "Loaded 3 sample task(s)."
    assert state.task_store.summary() == "Sample Task 1, Sample Task 2, Sample Task 3"


def test_suggest_without_runner(state: AppState) -> None:
    assert registry.handle(state, "/suggest") == "Suggestion loop is not running."


def test_suggest_emits_result(running_state: AppState, provider: FakeSuggestionProvider) -> None:
    running_state.task_store.add("Buy milk")
    provider.result = SuggestionResult.success("Group by urgency")

    notes: list[str] = []
    assert registry.handle(running_state, "/suggest", emit=notes.append) == "Requesting AI suggestions..."

    fut = running_state.pending_suggestion
    if fut is not None:
        fut.result(timeout=5.0)

    shown = registry.handle(running_state, "/suggestion") or ""
    assert "Group by urgency" in shown
    assert "changed since" not in shown

    running_state.task_store.add("Call bank")
    assert "changed since" in (registry.handle(running_state, "/ai") or "")


def test_cancel_without_pending(state: AppState) -> None:
    assert registry.handle(state, "/cancel") == "No suggestion request in flight."


def test_chat_and_chatlog(state: AppState) -> None:
    replies: list[str] = []
    assert registry.handle(state, "/chat hello there", emit=replies.append) == "You: hello there"
    assert registry.handle(state, "/chat") == "Usage: /chat <message>"

    log = registry.handle(state, "/chatlog") or ""
    assert "You: hello there" in log
    assert "I’ll help you with 'hello there'" in log
    assert replies and replies[0].startswith("Bot: ")


def test_status_and_help(state: AppState) -> None:
    assert "Tasks: 0" in (registry.handle(state, "/status") or "")
    help_text = registry.handle(state, "/help") or ""
    for name in ("/add", "/rm", "/suggest", "/chat"):
        assert name in help_text
