"""Signed JWT assertions for the service-account (jwt-bearer) grant."""

from __future__ import annotations

import time
from typing import Optional

from google.auth import crypt, jwt

ASSERTION_LIFETIME_SEC: int = 3600


def build_service_account_assertion(
    client_email: str,
    private_key: str,
    *,
    scope: str,
    audience: str,
    issued_at: Optional[int] = None,
) -> str:
    """
    Return `base64url(header).base64url(claims).base64url(RS256 signature)`.

    Header is {"alg": "RS256", "typ": "JWT"}; claims are iss/scope/aud/iat/exp
    with a one hour lifetime.

    Raises:
        ValueError: if the private key cannot be loaded.
    """
    iat = int(time.time()) if issued_at is None else int(issued_at)
    payload = {
        "iss": client_email,
        "scope": scope,
        "aud": audience,
        "iat": iat,
        "exp": iat + ASSERTION_LIFETIME_SEC,
    }
    signer = crypt.RSASigner.from_string(private_key)
    token = jwt.encode(signer, payload, header={"alg": "RS256", "typ": "JWT"})
    return token.decode("ascii") if isinstance(token, bytes) else token
