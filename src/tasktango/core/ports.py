# src/tasktango/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the suggestion provider swappable (HTTP / offline / test fake).
"""

from collections.abc import Iterable
from datetime import date
from typing import Any, Protocol


class SuggestionProvider(Protocol):
    """One completion-style round trip: prompt in, SuggestionResult out."""
    async def request_suggestion(
            self,
            prompt: str,
            endpoint: str | None = None,
            max_tokens: int | None = None,
    ) -> Any: ...


class TaskRepo(Protocol):
    @property
    def revision(self) -> int: ...

    def add(self, title: str, category: Any = None, due_date: date | None = None) -> Any | None: ...
    def remove_at(self, indices: Iterable[int]) -> list[Any]: ...
    def summary(self, separator: str = ", ") -> str: ...
    def list_tasks(self) -> list[Any]: ...
    def count_tasks(self) -> int: ...
    def clear(self) -> int: ...
