# src/tasktango/connectors/console_connector.py

from __future__ import annotations

import logging
import sys
from datetime import datetime

from ..cli.commands import format_task_list
from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _rewrite_prev_line(line: str) -> None:
    """
    Replace the last terminal line with `line`.
    Best-effort: if not a TTY, just print a new line.
    """
    if sys.stdout.isatty():
        sys.stdout.write("\033[1A\033[2K\r")
        sys.stdout.write(line + "\n")
        sys.stdout.flush()
    else:
        print(line)


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (tasks=%s).", state.task_store.count_tasks())
    _print_ts("[CONSOLE] Manage tasks with /add, /list, /rm. Use /help for commands. Use /exit to quit.\n")
    _print_ts(format_task_list(state))

    def emit(text: str) -> None:
        # Late results (suggestions, chat replies) arrive from the background loop.
        print(f"\n[{_ts_local()}] {text}", flush=True)

    while True:
        try:
            user_input = input(">>> ").strip()
            _rewrite_prev_line(f"[{_ts_local()}] >>> {user_input}")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        # Plain text is a shortcut for adding a task.
        line = user_input if user_input.startswith("/") else f"/add {user_input}"

        try:
            response = command_registry.handle(state, line, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is not None:
            _print_ts(response)

    logger.info("Console connector finished.")
