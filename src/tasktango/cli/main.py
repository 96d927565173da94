# src/tasktango/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, starts the background suggestion loop,
then runs the console REPL in the main thread.
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..suggestions.runner import SuggestionRunner, cancel_pending

logger = logging.getLogger(__name__)


def _shutdown(state: AppState) -> None:
    """Best-effort shutdown: drop the in-flight request, then stop the loop."""
    try:
        cancel_pending(state)
    except Exception:
        logger.debug("Cancel pending suggestion failed.", exc_info=True)

    runner = state.runner
    if runner is not None:
        try:
            runner.stop(timeout=5.0)
        except Exception:
            logger.exception("Failed to stop suggestion loop.")


def main() -> None:
    settings = get_settings()

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    runner = SuggestionRunner().start()
    state = create_initial_state(settings=settings, runner=runner)

    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        else:
            signal.signal(signal.SIGINT, _handle_signal)
            signal.signal(signal.SIGTERM, _handle_signal)
            logger.info("Console disabled. Nothing to do until Ctrl+C.")
            stop_main.wait()
    finally:
        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
