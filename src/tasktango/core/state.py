# src/tasktango/core/state.py

from __future__ import annotations

import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..suggestions.client import SuggestionError
from .chat import ChatSession
from .ports import SuggestionProvider, TaskRepo

if TYPE_CHECKING:
    from ..suggestions.runner import SuggestionRunner

SUGGESTION_PLACEHOLDER = "AI suggestions will appear here."


@dataclass
class AppState:
    """
    Everything the connectors render and mutate.

    Mutations coming from the suggestion loop thread happen under `lock`.
    """

    settings: Any
    task_store: TaskRepo
    suggestions: SuggestionProvider

    chat: ChatSession = field(default_factory=ChatSession)
    runner: SuggestionRunner | None = None
    lock: threading.RLock = field(default_factory=threading.RLock)

    suggestion_text: str = SUGGESTION_PLACEHOLDER
    # Store revision the shown suggestion was computed from (None: nothing fetched yet).
    suggestion_revision: int | None = None
    last_suggestion_error: SuggestionError | None = None

    # Bumped per request; only the latest request may write suggestion_text.
    suggestion_seq: int = 0
    pending_suggestion: Future | None = None
