# src/tasktango/suggestions/runner.py

"""
Suggestion delivery.

The console REPL blocks on input(), so async work (suggestion round trips,
delayed chat replies) runs on an event loop owned by a background thread.

Delivery rules:
- a new request supersedes (cancels) the still-pending previous one,
- only the latest request may write AppState.suggestion_text,
- a failed round trip keeps the previous suggestion text untouched,
- results are applied under AppState.lock.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from collections.abc import Coroutine
from concurrent.futures import Future
from typing import Any

from ..config import DEFAULT_SUGGESTION_PROMPT_PREFIX
from ..core.ports import SuggestionProvider
from ..core.state import AppState
from ..tasks.task_api import build_suggestion_prompt
from .client import SuggestionError, SuggestionResult

logger = logging.getLogger(__name__)


class SuggestionRunner:
    """Event loop in a daemon thread; coroutines are submitted from any thread."""

    def __init__(self, name: str = "tasktango-suggestions") -> None:
        self._name = name
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._ready = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._loop is not None and self._thread is not None and self._thread.is_alive()

    def start(self) -> SuggestionRunner:
        if self.is_running:
            return self

        self._ready.clear()

        def runner() -> None:
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)
            self._loop = loop
            self._ready.set()
            try:
                loop.run_forever()
            finally:
                with contextlib.suppress(Exception):
                    _cancel_leftovers(loop)
                with contextlib.suppress(Exception):
                    loop.close()

        self._thread = threading.Thread(target=runner, name=self._name, daemon=True)
        self._thread.start()

        if not self._ready.wait(timeout=5.0):
            raise RuntimeError("Suggestion loop thread did not start.")

        logger.info("Suggestion loop started.")
        return self

    def submit(self, coro: Coroutine[Any, Any, Any]) -> Future:
        loop = self._loop
        if loop is None or not self.is_running:
            coro.close()
            raise RuntimeError("Suggestion loop is not running.")
        return asyncio.run_coroutine_threadsafe(coro, loop)

    def stop(self, timeout: float | None = 5.0) -> None:
        loop = self._loop
        if loop is None:
            return
        try:
            loop.call_soon_threadsafe(loop.stop)
        except RuntimeError:
            logger.debug("Suggestion loop already closed.", exc_info=True)
        if self._thread is not None:
            self._thread.join(timeout=timeout)
        self._loop = None
        self._thread = None
        logger.info("Suggestion loop stopped.")


def _cancel_leftovers(loop: asyncio.AbstractEventLoop) -> None:
    pending = [t for t in asyncio.all_tasks(loop) if not t.done()]
    for t in pending:
        t.cancel()
    if pending:
        loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))


def apply_suggestion_result(state: AppState, result: SuggestionResult, *, seq: int, revision: int) -> bool:
    """
    Write a finished round trip into the state.

    Returns True if suggestion_text was replaced.
    """
    with state.lock:
        if seq != state.suggestion_seq:
            logger.debug("Dropping superseded suggestion seq=%s (current=%s)", seq, state.suggestion_seq)
            return False

        state.pending_suggestion = None

        if not result.ok:
            state.last_suggestion_error = result.error
            return False

        # Overwrite even if the task list changed meanwhile; staleness is reported separately.
        state.suggestion_text = result.text or ""
        state.suggestion_revision = revision
        state.last_suggestion_error = None
        return True


async def refresh_suggestion(
    state: AppState,
    *,
    seq: int | None = None,
    provider: SuggestionProvider | None = None,
) -> SuggestionResult:
    """
    Run one suggestion round trip for the current task list and apply it.

    `provider` defaults to state.suggestions at the time the round trip starts.

    Usable directly from async code; `request_suggestions` wraps it for the REPL.
    """
    settings = state.settings
    prefix = getattr(settings, "suggestion_prompt_prefix", DEFAULT_SUGGESTION_PROMPT_PREFIX)

    with state.lock:
        if seq is None:
            state.suggestion_seq += 1
            seq = state.suggestion_seq
        revision = state.task_store.revision
        prompt = build_suggestion_prompt(state.task_store, prefix)

    try:
        result = await (provider or state.suggestions).request_suggestion(
            prompt,
            getattr(settings, "suggestion_endpoint", None),
            getattr(settings, "suggestion_max_tokens", None),
        )
    except asyncio.CancelledError:
        logger.debug("Suggestion request seq=%s cancelled.", seq)
        raise
    except Exception:
        # Providers should return failures, but a broken one must not kill the loop.
        logger.exception("Suggestion provider crashed.")
        result = SuggestionResult.failure(SuggestionError.NETWORK_FAILURE, "provider error")

    applied = apply_suggestion_result(state, result, seq=seq, revision=revision)
    if result.ok:
        logger.info("Suggestion updated seq=%s applied=%s", seq, applied)
    else:
        logger.info("No new suggestion seq=%s (%s)", seq, result.error)
    return result


def request_suggestions(state: AppState) -> Future:
    """
    Fire-and-forget: start a round trip on the background loop.

    Cancels the previous pending request. The returned future resolves to the
    SuggestionResult after it has been applied to the state.
    """
    runner = state.runner
    if runner is None:
        raise RuntimeError("Suggestion runner is not configured.")

    with state.lock:
        previous = state.pending_suggestion
        state.suggestion_seq += 1
        seq = state.suggestion_seq
        provider = state.suggestions

    if previous is not None and not previous.done():
        previous.cancel()
        logger.debug("Cancelled superseded suggestion request.")

    fut = runner.submit(refresh_suggestion(state, seq=seq, provider=provider))

    with state.lock:
        if state.suggestion_seq == seq and not fut.done():
            state.pending_suggestion = fut
    return fut


def cancel_pending(state: AppState) -> bool:
    """Cancel the in-flight request, if any. Returns True if something was cancelled."""
    with state.lock:
        fut = state.pending_suggestion
        state.pending_suggestion = None
        if fut is None or fut.done():
            return False
        # Invalidate the sequence so a late completion cannot write anything.
        state.suggestion_seq += 1
        state.last_suggestion_error = SuggestionError.CANCELLED

    cancelled = fut.cancel()
    logger.info("Suggestion request cancelled=%s", cancelled)
    return True


def is_suggestion_pending(state: AppState) -> bool:
    with state.lock:
        fut = state.pending_suggestion
        return fut is not None and not fut.done()


def is_suggestion_stale(state: AppState) -> bool:
    """True when the shown suggestion was computed from an older task list."""
    with state.lock:
        if state.suggestion_revision is None:
            return False
        return state.suggestion_revision != state.task_store.revision
