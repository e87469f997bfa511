"""Cookie session tokens built on the same cipher as capability links."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from gdindex.util.time import days_to_ms, now_epoch_ms

from .cipher import AesCbcCipher
from .links import DECODE_ERRORS

_SEPARATOR = "|"


@dataclass(slots=True, frozen=True)
class SessionClaims:
    username: str
    password: str = field(repr=False)
    expires_at_ms: int = 0


class SessionCodec:
    """
    Session token: encrypt(username)|encrypt(password)|encrypt(expiry_ms).

    The token carries no server-side state, so credentials are re-checked
    against the user store on every request by the caller.
    """

    def __init__(
        self,
        cipher: AesCbcCipher,
        *,
        clock: Callable[[], int] = now_epoch_ms,
    ) -> None:
        self._cipher = cipher
        self._clock = clock

    def mint(self, username: str, password: str, ttl_days: float) -> str:
        expires_at = self._clock() + days_to_ms(ttl_days)
        parts = (
            self._cipher.encrypt(username),
            self._cipher.encrypt(password),
            self._cipher.encrypt(str(expires_at)),
        )
        return _SEPARATOR.join(parts)

    def verify(self, token: Optional[str]) -> Optional[SessionClaims]:
        if not token or token == "null":
            return None

        parts = token.split(_SEPARATOR)
        if len(parts) != 3:
            return None

        try:
            username = self._cipher.decrypt(parts[0])
            password = self._cipher.decrypt(parts[1])
            expires_at = int(self._cipher.decrypt(parts[2]))
        except DECODE_ERRORS:
            return None

        if expires_at < self._clock():
            return None

        return SessionClaims(username=username, password=password, expires_at_ms=expires_at)
