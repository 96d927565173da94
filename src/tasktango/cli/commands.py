# src/tasktango/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
from collections.abc import Callable
from concurrent.futures import CancelledError, Future
from typing import cast

from ..core.chat import send_chat_message
from ..core.state import AppState
from ..suggestions.client import SuggestionResult, friendly_suggestion_error_message
from ..suggestions.runner import (
    cancel_pending,
    is_suggestion_pending,
    is_suggestion_stale,
    request_suggestions,
)
from ..tasks.task_api import load_sample_tasks, parse_due_date
from ..tasks.task_models import TaskCategory

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, emit: CommandEmitter | None = None) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def format_task_list(state: AppState) -> str:
    tasks = state.task_store.list_tasks()
    if not tasks:
        return "No tasks. Add one with /add <title>."
    lines = [f"Tasks ({len(tasks)}):"]
    for i, t in enumerate(tasks, start=1):
        lines.append(f"{i:>3}. {t.title}  [{t.category.value}]  due {t.due_date.strftime('%b %d, %Y')}")
    return "\n".join(lines)


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    mode = "OFFLINE DEMO" if getattr(settings, "suggestions_offline", False) else "HTTP"
    pending = "yes" if is_suggestion_pending(state) else "no"
    return (
        "Status:\n"
        f"  Tasks: {state.task_store.count_tasks()}\n"
        f"  Suggestions: {mode} -> {getattr(settings, 'suggestion_endpoint', '?')}"
        f" (max_tokens={getattr(settings, 'suggestion_max_tokens', '?')})\n"
        f"  Suggestion pending: {pending}"
    )


def _split_add_args(args: list[str]) -> tuple[list[str], list[str]] | None:
    """
    Split /add arguments into (option tokens, title words).

    With a "--" separator everything before it is options and everything after
    it is the title, verbatim. Without one only trailing #category / @due
    tokens (at most one of each) are options, so "Fix #42 crash" stays a title.
    Returns None when a token before "--" is not an option.
    """
    if "--" in args:
        sep = args.index("--")
        head, tail = args[:sep], args[sep + 1 :]
        if any(not _is_add_option(a) for a in head):
            return None
        return head, tail

    title = list(args)
    options: list[str] = []
    seen: set[str] = set()
    while title and _is_add_option(title[-1]) and title[-1][0] not in seen:
        seen.add(title[-1][0])
        options.insert(0, title.pop())
    return options, title


def _is_add_option(token: str) -> bool:
    return len(token) > 1 and token[0] in "#@"


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title words...> [#category] [@due]
    /add [#category] [@due] -- <title words...>

    @due accepts YYYY-MM-DD, today, tomorrow or +N (days).
    """
    split = _split_add_args(args)
    if split is None:
        return "Only #category and @due may come before --. Usage: /add [#category] [@due] -- <title>"
    options, title_parts = split

    category: TaskCategory = TaskCategory.WORK
    due_raw: str | None = None

    for a in options:
        if a.startswith("#"):
            try:
                category = TaskCategory.parse(a[1:])
            except ValueError:
                choices = ", ".join(c.value for c in TaskCategory)
                return f"Unknown category {a[1:]!r}. Choose one of: {choices}."
        else:
            due_raw = a[1:]

    try:
        due = parse_due_date(due_raw)
    except ValueError as e:
        return str(e)

    with state.lock:
        task = state.task_store.add(" ".join(title_parts), category, due)

    if task is None:
        return "Task title must not be empty. Usage: /add <title> [#category] [@due]"
    return f"Added: {task.title} [{task.category.value}] due {task.due_date.isoformat()}"


def cmd_list(state: AppState, args: list[str]) -> str:
    return format_task_list(state)


def cmd_rm(state: AppState, args: list[str]) -> str:
    """/rm <n> [m ...] removes tasks by their 1-based position in /list."""
    if not args:
        return "Usage: /rm <n> [m ...] (positions as shown by /list)."

    positions: list[int] = []
    for a in args:
        for piece in a.split(","):
            piece = piece.strip()
            if not piece:
                continue
            try:
                positions.append(int(piece) - 1)
            except ValueError:
                return f"Not a position: {piece!r}. Usage: /rm <n> [m ...]."

    with state.lock:
        removed = state.task_store.remove_at(positions)

    if not removed:
        return "Nothing removed (positions out of range)."
    return "Removed: " + ", ".join(t.title for t in removed)


def cmd_clear(state: AppState, args: list[str]) -> str:
    with state.lock:
        n = state.task_store.clear()
    return f"Cleared {n} task(s)."


def cmd_sample(state: AppState, args: list[str]) -> str:
    count = int(getattr(state.settings, "sample_task_count", 10) or 10)
    if args:
        try:
            count = max(0, int(args[0]))
        except ValueError:
            return "Usage: /sample [count]"
    with state.lock:
        added = load_sample_tasks(state.task_store, count=count)
    if not added:
        return "Sample tasks are only loaded into an empty list."
    return f"Loaded {added} sample task(s)."


def cmd_summary(state: AppState, args: list[str]) -> str:
    summary = state.task_store.summary()
    return summary or "(no tasks)"


def _render_suggestion(state: AppState) -> str:
    with state.lock:
        text = state.suggestion_text
        err = state.last_suggestion_error
    lines = ["AI suggestions:", text]
    if is_suggestion_stale(state):
        lines.append("(task list changed since this suggestion; use /suggest to refresh)")
    if err is not None:
        lines.append(f"(last request failed: {err.value})")
    return "\n".join(lines)


def cmd_suggest(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    runner = state.runner
    if runner is None or not runner.is_running:
        return "Suggestion loop is not running."

    fut = request_suggestions(state)

    if emit is not None:

        def _on_done(f: Future) -> None:
            try:
                result: SuggestionResult = f.result()
            except CancelledError:
                return
            except Exception:
                logger.exception("Suggestion request crashed.")
                return
            with contextlib.suppress(Exception):
                if result.ok:
                    emit(_render_suggestion(state))
                else:
                    emit(f"[AI] {friendly_suggestion_error_message(result)}")

        fut.add_done_callback(_on_done)

    return "Requesting AI suggestions..."


def cmd_suggestion(state: AppState, args: list[str]) -> str:
    return _render_suggestion(state)


def cmd_cancel(state: AppState, args: list[str]) -> str:
    if cancel_pending(state):
        return "Pending suggestion request cancelled."
    return "No suggestion request in flight."


def cmd_chat(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    text = " ".join(args)
    fut = send_chat_message(state, text)
    if fut is None:
        return "Usage: /chat <message>"

    if emit is not None:

        def _on_reply(f: Future) -> None:
            if f.cancelled() or f.exception() is not None:
                return
            with contextlib.suppress(Exception):
                emit(str(f.result()))

        fut.add_done_callback(_on_reply)

    return f"You: {text.strip()}"


def cmd_chatlog(state: AppState, args: list[str]) -> str:
    return "\n".join(state.chat.messages())


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show task count and suggestion settings.")
registry.register("add", cmd_add, help_text="Add a task: /add <title> [#category] [@YYYY-MM-DD|today|+N] (or /add [#category] [@due] -- <title>).")
registry.register("list", cmd_list, help_text="List tasks.", aliases=["ls"])
registry.register("rm", cmd_rm, help_text="Remove tasks by position: /rm 1 3.", aliases=["del"])
registry.register("clear", cmd_clear, help_text="Remove all tasks.")
registry.register("sample", cmd_sample, help_text="Load sample tasks into an empty list: /sample [count].")
registry.register("summary", cmd_summary, help_text="Show task titles joined by commas.")
registry.register("suggest", cmd_suggest, help_text="Ask the suggestion server about the current tasks.")
registry.register("suggestion", cmd_suggestion, help_text="Show the current AI suggestion.", aliases=["ai"])
registry.register("cancel", cmd_cancel, help_text="Cancel the pending suggestion request.")
registry.register("chat", cmd_chat, help_text="Talk to the support bot: /chat <message>.")
registry.register("chatlog", cmd_chatlog, help_text="Show the support chat history.")
