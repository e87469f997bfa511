"""Credential stores used to re-check session claims."""

from __future__ import annotations

import hmac
from typing import Iterable, Mapping, Protocol


class UserStore(Protocol):
    async def verify(self, username: str, password: str) -> bool: ...


class StaticUserStore:
    """Username/password pairs from configuration."""

    def __init__(self, users: Iterable[Mapping[str, str]]) -> None:
        self._users: dict[str, str] = {}
        for entry in users:
            username = entry.get("username")
            password = entry.get("password")
            if isinstance(username, str) and isinstance(password, str) and username:
                self._users[username] = password

    async def verify(self, username: str, password: str) -> bool:
        stored = self._users.get(username)
        if stored is None:
            return False
        return hmac.compare_digest(stored.encode("utf-8"), password.encode("utf-8"))
