"""Exception hierarchy and HTTP error mapping for gdindex."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class GDIndexError(Exception):
    """
    Base exception for gdindex.

    Attributes:
        details: Optional structured information (e.g., HTTP status, reason).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class ConfigError(GDIndexError):
    """Raised when settings or call arguments are invalid."""


class InvalidStateError(GDIndexError):
    """Raised when the index is used in an invalid state (e.g., open not called)."""


class TokenExchangeError(GDIndexError):
    """Raised when the credential exchange is rejected or unreachable after retries."""


class RemoteStoreError(GDIndexError):
    """Raised when a listing/metadata/search call fails after retries."""


class AccessDeniedError(RemoteStoreError):
    """Raised when access is denied (HTTP 401, HTTP 403 non-quota)."""


class RateLimitError(RemoteStoreError):
    """Raised when rate-limited (HTTP 429)."""


class QuotaExceededError(RemoteStoreError):
    """Raised when quota is exceeded (HTTP 403 with quota-related reason)."""


class NetworkError(RemoteStoreError):
    """Raised when network/timeout issues prevent the request."""


class ApiError(RemoteStoreError):
    """Raised for unclassified API errors (5xx, unknown 4xx, etc.)."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to gdindex exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


_QUOTA_REASON_KEYWORDS: tuple[str, ...] = (
    "quota",
    "dailyLimitExceeded",
    "usageLimits",
    "storageQuotaExceeded",
)

_RATE_LIMIT_REASONS: tuple[str, ...] = (
    "rateLimitExceeded",
    "userRateLimitExceeded",
)


def _matches(reason: str | None, keywords: tuple[str, ...]) -> bool:
    if not reason:
        return False
    return any(key.lower() in reason.lower() for key in keywords)


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> RemoteStoreError:
    """
    Map a failed Drive HTTP response to a RemoteStoreError subclass.

    Policy:
        - 401 -> AccessDeniedError
        - 403 -> AccessDeniedError, RateLimitError or QuotaExceededError by reason
        - 429 -> RateLimitError
        - otherwise -> ApiError

    The message never carries the upstream body; it only names the status.
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = f"Drive request failed with HTTP {info.status_code}"

    if info.status_code == 401:
        return AccessDeniedError(message, details=details, cause=cause)
    if info.status_code == 403:
        if _matches(info.reason, _RATE_LIMIT_REASONS):
            return RateLimitError(message, details=details, cause=cause)
        if _matches(info.reason, _QUOTA_REASON_KEYWORDS):
            return QuotaExceededError(message, details=details, cause=cause)
        return AccessDeniedError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)

    return ApiError(message, details=details, cause=cause)
