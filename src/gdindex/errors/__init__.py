"""Public error exports for gdindex."""

from __future__ import annotations

from .exceptions import (
    AccessDeniedError,
    ApiError,
    ConfigError,
    GDIndexError,
    HttpErrorInfo,
    InvalidStateError,
    NetworkError,
    QuotaExceededError,
    RateLimitError,
    RemoteStoreError,
    TokenExchangeError,
    map_http_error,
)

__all__ = [
    "GDIndexError",
    "ConfigError",
    "InvalidStateError",
    "TokenExchangeError",
    "RemoteStoreError",
    "AccessDeniedError",
    "RateLimitError",
    "QuotaExceededError",
    "NetworkError",
    "ApiError",
    "HttpErrorInfo",
    "map_http_error",
]
