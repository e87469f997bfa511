"""HMAC-SHA256 integrity tags."""

from __future__ import annotations

import hashlib
import hmac


def compute_mac(data: str, key: str) -> str:
    """Return the hex HMAC-SHA256 of `data` under `key`."""
    return hmac.new(key.encode("utf-8"), data.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_mac(data: str, expected: str, key: str) -> bool:
    """Exact, constant-time comparison as bytes; any non-string input fails."""
    if not isinstance(expected, str):
        return False
    computed = compute_mac(data, key).encode("ascii")
    return hmac.compare_digest(computed, expected.encode("utf-8", "surrogatepass"))


def canonical(*values: object) -> str:
    """Pipe-join the plaintext claim values in their fixed order."""
    return "|".join(str(v) for v in values)
