# src/tasktango/core/chat.py

"""
Support chat.

A canned support bot: every user message is echoed back with a friendly reply
after a short delay. Transport-agnostic: connectors print `messages()` however
they like and use `is_user_message()` to tell the two sides apart.

Key invariants:
- empty/whitespace messages are rejected and never appear in the log,
- the bot reply is appended after the user message it answers.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from concurrent.futures import Future
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .state import AppState

logger = logging.getLogger(__name__)

GREETING = "Hello 👋 I am your support bot. How can I help you?"
USER_PREFIX = "You: "
BOT_PREFIX = "Bot: "


def bot_reply_for(text: str) -> str:
    return f"{BOT_PREFIX}Thanks for your message! I’ll help you with '{text}' 😊"


def is_user_message(msg: str) -> bool:
    return msg.startswith(USER_PREFIX.rstrip())


class ChatSession:
    def __init__(self, greeting: str = GREETING) -> None:
        self._lock = threading.Lock()
        self._messages: list[str] = [greeting] if greeting else []

    def messages(self) -> list[str]:
        with self._lock:
            return list(self._messages)

    def post_user_message(self, text: str) -> str | None:
        """Append "You: <text>" and return the trimmed text, or None if empty."""
        clean = (text or "").strip()
        if not clean:
            return None
        with self._lock:
            self._messages.append(f"{USER_PREFIX}{clean}")
        return clean

    def send(self, text: str) -> bool:
        """Post a user message; False (and nothing appended) for empty input."""
        return self.post_user_message(text) is not None

    def post_bot_reply(self, text: str) -> str:
        reply = bot_reply_for(text)
        with self._lock:
            self._messages.append(reply)
        return reply

    async def reply_later(
        self, text: str, delay_seconds: float, lock: contextlib.AbstractContextManager[Any] | None = None
    ) -> str:
        if delay_seconds > 0:
            await asyncio.sleep(delay_seconds)
        with lock if lock is not None else contextlib.nullcontext():
            return self.post_bot_reply(text)


def send_chat_message(state: AppState, text: str) -> Future | None:
    """
    Post a user message and schedule the bot reply on the background loop.

    Returns the future of the reply (None when the message was rejected).
    The reply is appended under state.lock.
    Without a running loop the reply is appended immediately.
    """
    clean = state.chat.post_user_message(text)
    if clean is None:
        logger.debug("Rejected empty chat message.")
        return None

    delay = float(getattr(state.settings, "chat_reply_delay_seconds", 1.0))

    runner = state.runner
    if runner is None or not runner.is_running:
        done: Future = Future()
        with state.lock:
            done.set_result(state.chat.post_bot_reply(clean))
        return done

    return runner.submit(state.chat.reply_later(clean, delay, state.lock))
