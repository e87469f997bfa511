"""gdindex public API."""

from __future__ import annotations

from loguru import logger

from gdindex.auth import (
    BearerToken,
    CredentialRef,
    RefreshTokenCredential,
    ServiceAccountCredential,
    StaticUserStore,
    TokenManager,
    TokenStore,
    UserStore,
)
from gdindex.config import IndexSettings
from gdindex.context import IndexContext
from gdindex.controller import DriveController
from gdindex.crypto import (
    AesCbcCipher,
    CapabilityLinkCodec,
    DownloadCapability,
    LinkClaims,
    SessionClaims,
    SessionCodec,
)
from gdindex.errors import (
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
from gdindex.manager import DownloadStream, DriveIndex
from gdindex.models import (
    DriveRoot,
    FileRecord,
    ListPage,
    PathLookup,
    PublicFileRecord,
    RootType,
    SearchScope,
)
from gdindex.resolver import PathResolver
from gdindex.util.retry import RetryPolicy

# Library default: silent until the host calls logger.enable("gdindex").
logger.disable("gdindex")

__all__ = [
    # High-level
    "DriveIndex",
    "IndexContext",
    "IndexSettings",
    "RetryPolicy",
    "DownloadStream",
    # Core components
    "TokenManager",
    "TokenStore",
    "BearerToken",
    "DriveController",
    "PathResolver",
    "AesCbcCipher",
    "CapabilityLinkCodec",
    "SessionCodec",
    "DownloadCapability",
    "LinkClaims",
    "SessionClaims",
    # Credentials / users
    "CredentialRef",
    "RefreshTokenCredential",
    "ServiceAccountCredential",
    "UserStore",
    "StaticUserStore",
    # Models
    "DriveRoot",
    "RootType",
    "SearchScope",
    "FileRecord",
    "PublicFileRecord",
    "ListPage",
    "PathLookup",
    # Errors
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
