"""Long-lived credentials exchanged for bearer tokens."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from gdindex.errors import ConfigError


@dataclass(slots=True, frozen=True)
class RefreshTokenCredential:
    """OAuth client plus a user's refresh token."""

    client_id: str
    client_secret: str = field(repr=False)
    refresh_token: str = field(repr=False)

    def __post_init__(self) -> None:
        for key in ("client_id", "client_secret", "refresh_token"):
            value = getattr(self, key)
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"RefreshTokenCredential.{key} must be a non-empty string")

    @property
    def cache_key(self) -> str:
        return _stable_hash(
            {
                "kind": "refresh_token",
                "client_id": self.client_id,
                "refresh_token": self.refresh_token,
            }
        )


@dataclass(slots=True, frozen=True)
class ServiceAccountCredential:
    """
    Service-account JSON key.

    Only `client_email` and `private_key` are needed for the assertion;
    the rest of the key file is kept for completeness.
    """

    json_key: Mapping[str, Any] = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.json_key, Mapping):
            raise ConfigError("ServiceAccountCredential.json_key must be a mapping")
        for key in ("client_email", "private_key"):
            value = self.json_key.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"service account json_key['{key}'] must be a non-empty string")

    @classmethod
    def from_json(cls, text: str) -> "ServiceAccountCredential":
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise ConfigError("Service account key is not valid JSON", cause=exc) from exc
        return cls(json_key=data)

    @property
    def client_email(self) -> str:
        return str(self.json_key["client_email"])

    @property
    def private_key(self) -> str:
        return str(self.json_key["private_key"])

    @property
    def cache_key(self) -> str:
        return _stable_hash(
            {
                "kind": "service_account",
                "client_email": self.client_email,
                "private_key_id": self.json_key.get("private_key_id"),
            }
        )


CredentialRef = Union[RefreshTokenCredential, ServiceAccountCredential]


def credential_from_mapping(data: Mapping[str, Any]) -> CredentialRef:
    """
    Build a CredentialRef from a config block.

    Accepts either {"service_account_json": {...}} / {"service_account_json": "<json>"}
    or {"client_id", "client_secret", "refresh_token"}.
    """
    if not isinstance(data, Mapping):
        raise ConfigError("auth block must be a mapping")

    sa = data.get("service_account_json")
    if sa:
        if isinstance(sa, str):
            return ServiceAccountCredential.from_json(sa)
        return ServiceAccountCredential(json_key=dict(sa))

    return RefreshTokenCredential(
        client_id=data.get("client_id", ""),
        client_secret=data.get("client_secret", ""),
        refresh_token=data.get("refresh_token", ""),
    )


def _stable_hash(fields: dict[str, Any]) -> str:
    canonical = json.dumps(fields, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
