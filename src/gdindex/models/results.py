"""Result models for listings and reverse lookups."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

R = TypeVar("R")


@dataclass(slots=True, frozen=True)
class ListPage(Generic[R]):
    """One page of a listing or search."""

    files: list[R] = field(default_factory=list)
    next_page_token: Optional[str] = None
    page_index: int = 0


@dataclass(slots=True, frozen=True)
class PathLookup:
    """Result of walking from an id up to a configured root."""

    path: str
    root_index: int

    @property
    def route(self) -> str:
        """Route form used by the web layer, e.g. '/0:/Docs/a.txt'."""
        return f"/{self.root_index}:{self.path}"
