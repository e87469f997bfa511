"""Drive query-language builders. Every user-supplied value is escaped."""

from __future__ import annotations

import re
from typing import Sequence

from gdindex.util.mime import FOLDER_MIME, PASSWORD_MARKER_NAME, SHORTCUT_MIME

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_SEARCH_DROP = re.compile(r"(!=)|['\"=<>/\\:]")
_SEARCH_SPACE = re.compile(r"[,，|(){}]")


def escape_query_value(value: str) -> str:
    """Make `value` safe inside a single-quoted Drive query literal."""
    cleaned = _CONTROL_CHARS.sub("", value)
    return cleaned.replace("\\", "\\\\").replace("'", "\\'")


def format_search_terms(keyword: str | None) -> list[str]:
    """
    Reduce a free-text keyword to plain words.

    Operators and quotes are dropped; separators become spaces.
    """
    if not keyword:
        return []
    text = _CONTROL_CHARS.sub(" ", keyword)
    text = _SEARCH_DROP.sub("", text)
    text = _SEARCH_SPACE.sub(" ", text)
    return text.split()


def _listing_filters() -> str:
    return (
        "trashed = false"
        f" and name != '{PASSWORD_MARKER_NAME}'"
        f" and mimeType != '{SHORTCUT_MIME}'"
    )


def children_query(parent_id: str) -> str:
    return f"'{escape_query_value(parent_id)}' in parents and {_listing_filters()}"


def child_by_name_query(parent_id: str, name: str, *, folders_only: bool) -> str:
    q = (
        f"'{escape_query_value(parent_id)}' in parents"
        f" and name = '{escape_query_value(name)}'"
        " and trashed = false"
    )
    if folders_only:
        return q + f" and mimeType = '{FOLDER_MIME}'"
    return q + f" and mimeType != '{SHORTCUT_MIME}'"


def search_query(words: Sequence[str]) -> str:
    names = " and ".join(f"name contains '{escape_query_value(w)}'" for w in words)
    return f"{_listing_filters()} and ({names})"
