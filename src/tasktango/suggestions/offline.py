# src/tasktango/suggestions/offline.py

from __future__ import annotations

from ..config import DEFAULT_SUGGESTION_PROMPT_PREFIX
from ..core.ports import TaskRepo
from .client import SuggestionResult


class OfflineSuggestionClient:
    """
    Offline deterministic suggestion client used for demos when no server is running.

    Behavior:
    - with a task store: echoes the stored titles back
    - without one: strips the known prompt prefix and splits the rest on ", "
      (a title that itself contains ", " is then counted as two tasks)
    - empty task list -> a fixed hint
    - never touches the network
    """

    def __init__(
        self,
        prompt_prefix: str = DEFAULT_SUGGESTION_PROMPT_PREFIX,
        task_store: TaskRepo | None = None,
    ) -> None:
        self.prompt_prefix = prompt_prefix
        self.task_store = task_store
        self.calls: int = 0

    def _titles(self, prompt: str) -> list[str]:
        if self.task_store is not None:
            return [t.title for t in self.task_store.list_tasks()]
        body = prompt[len(self.prompt_prefix):] if prompt.startswith(self.prompt_prefix) else prompt
        return [t.strip() for t in body.split(", ") if t.strip()]

    async def request_suggestion(
        self,
        prompt: str,
        endpoint: str | None = None,
        max_tokens: int | None = None,
    ) -> SuggestionResult:
        self.calls += 1

        titles = self._titles(prompt)
        if not titles:
            return SuggestionResult.success("Offline demo mode: add some tasks first.")

        return SuggestionResult.success(
            "Offline demo mode: no suggestion server is configured.\n"
            "Set TASKTANGO_SUGGESTION_ENDPOINT to enable real suggestions.\n\n"
            f"Tasks to categorize ({len(titles)}): {'; '.join(titles)}"
        )
