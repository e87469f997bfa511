"""Public auth exports for gdindex."""

from __future__ import annotations

from .credentials import (
    CredentialRef,
    RefreshTokenCredential,
    ServiceAccountCredential,
    credential_from_mapping,
)
from .token_manager import BearerToken, TokenManager, TokenStore
from .users import StaticUserStore, UserStore

__all__ = [
    "CredentialRef",
    "RefreshTokenCredential",
    "ServiceAccountCredential",
    "credential_from_mapping",
    "BearerToken",
    "TokenStore",
    "TokenManager",
    "UserStore",
    "StaticUserStore",
]
