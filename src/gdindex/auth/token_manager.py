"""Exchange long-lived credentials for short-lived bearer tokens."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import httpx
from google.auth.exceptions import GoogleAuthError
from loguru import logger

from gdindex.crypto.assertion import build_service_account_assertion
from gdindex.errors import TokenExchangeError
from gdindex.util.retry import RetryPolicy, run_with_retry

from .credentials import CredentialRef, RefreshTokenCredential, ServiceAccountCredential

TOKEN_URI: str = "https://oauth2.googleapis.com/token"
DRIVE_SCOPE: str = "https://www.googleapis.com/auth/drive"
JWT_BEARER_GRANT: str = "urn:ietf:params:oauth:grant-type:jwt-bearer"
DEFAULT_EXPIRES_IN_SEC: int = 3600


@dataclass(slots=True, frozen=True)
class BearerToken:
    value: str = field(repr=False)
    expires_at: float

    def is_usable(self, now: float, safety_margin_sec: float) -> bool:
        """True while `now` is earlier than expiry minus the margin."""
        return now < self.expires_at - safety_margin_sec


class TokenStore:
    """
    Process-local map of credential cache key -> BearerToken.

    No locking: a concurrent miss may store twice, and either token is valid.
    """

    def __init__(self) -> None:
        self._tokens: dict[str, BearerToken] = {}

    def get(self, key: str) -> Optional[BearerToken]:
        return self._tokens.get(key)

    def put(self, key: str, token: BearerToken) -> None:
        self._tokens[key] = token


class TokenManager:
    """
    Hand out bearer tokens per credential, exchanging on cache miss.

    Notes:
        - Tokens are reused until `safety_margin_sec` before their expiry.
        - Transport failures and 5xx answers are retried with backoff;
          a 4xx answer fails immediately.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        store: Optional[TokenStore] = None,
        retry: Optional[RetryPolicy] = None,
        safety_margin_sec: float = 100,
        scope: str = DRIVE_SCOPE,
        token_uri: str = TOKEN_URI,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._http = http
        self._store = store if store is not None else TokenStore()
        self._retry = retry or RetryPolicy()
        self._safety_margin_sec = safety_margin_sec
        self._scope = scope
        self._token_uri = token_uri
        self._clock = clock

    @property
    def store(self) -> TokenStore:
        return self._store

    async def get_token(self, credential: CredentialRef) -> BearerToken:
        """
        Return a usable token for `credential`.

        Raises:
            TokenExchangeError: when the exchange is rejected or unreachable.
        """
        key = credential.cache_key
        cached = self._store.get(key)
        if cached is not None and cached.is_usable(self._clock(), self._safety_margin_sec):
            return cached

        token = await self._exchange(credential)
        self._store.put(key, token)
        return token

    async def authorization_header(self, credential: CredentialRef) -> dict[str, str]:
        token = await self.get_token(credential)
        return {"Authorization": f"Bearer {token.value}"}

    # ----------------------------
    # Internals
    # ----------------------------
    async def _exchange(self, credential: CredentialRef) -> BearerToken:
        if isinstance(credential, ServiceAccountCredential):
            kind = "service_account"
            try:
                assertion = build_service_account_assertion(
                    credential.client_email,
                    credential.private_key,
                    scope=self._scope,
                    audience=self._token_uri,
                    issued_at=int(self._clock()),
                )
            except (ValueError, TypeError, GoogleAuthError) as exc:
                raise TokenExchangeError(
                    "Malformed service account key",
                    details={"client_email": credential.client_email},
                    cause=exc,
                ) from exc
            form = {"grant_type": JWT_BEARER_GRANT, "assertion": assertion}
        elif isinstance(credential, RefreshTokenCredential):
            kind = "refresh_token"
            form = {
                "client_id": credential.client_id,
                "client_secret": credential.client_secret,
                "refresh_token": credential.refresh_token,
                "grant_type": "refresh_token",
            }
        else:
            raise TokenExchangeError(
                "Unsupported credential type",
                details={"type": type(credential).__name__},
            )

        logger.info(f"Exchanging {kind} credential for a bearer token")
        issued = self._clock()
        body = await run_with_retry(
            lambda: self._post_form(form),
            self._retry,
            _is_transient,
            label="token exchange",
        )

        access_token = body.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise TokenExchangeError("Token endpoint returned no access_token")

        expires_in = body.get("expires_in", DEFAULT_EXPIRES_IN_SEC)
        try:
            lifetime = max(1, int(expires_in))
        except (TypeError, ValueError):
            lifetime = DEFAULT_EXPIRES_IN_SEC

        return BearerToken(value=access_token, expires_at=issued + lifetime)

    async def _post_form(self, form: dict[str, str]) -> dict[str, Any]:
        try:
            resp = await self._http.post(
                self._token_uri,
                data=form,
                headers={"Accept": "application/json"},
            )
        except httpx.TransportError as exc:
            raise TokenExchangeError("Token endpoint unreachable", cause=exc) from exc

        if resp.status_code >= 400:
            raise TokenExchangeError(
                "Token exchange rejected",
                details={
                    "status_code": resp.status_code,
                    "error": _oauth_error_code(resp),
                },
            )

        try:
            body = resp.json()
        except ValueError as exc:
            raise TokenExchangeError("Token endpoint returned invalid JSON", cause=exc) from exc
        if not isinstance(body, dict):
            raise TokenExchangeError("Token endpoint returned unexpected payload")
        return body


def _is_transient(exc: Exception) -> bool:
    if not isinstance(exc, TokenExchangeError):
        return False
    status_code = exc.details.get("status_code")
    if status_code is None:
        return isinstance(exc.cause, httpx.TransportError)
    return isinstance(status_code, int) and status_code >= 500


def _oauth_error_code(resp: httpx.Response) -> Optional[str]:
    """Return only the short OAuth `error` code, never the description."""
    try:
        payload = resp.json()
    except ValueError:
        return None
    if isinstance(payload, dict) and isinstance(payload.get("error"), str):
        return payload["error"]
    return None
