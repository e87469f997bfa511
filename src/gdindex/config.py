"""Settings supplied by the external configuration provider."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from gdindex.auth.credentials import credential_from_mapping
from gdindex.errors import ConfigError
from gdindex.models import DriveRoot
from gdindex.util.retry import RetryPolicy


@dataclass(slots=True, frozen=True)
class IndexSettings:
    """
    Everything the core needs from configuration.

    Notes:
        - `crypto_base_key` is used as raw UTF-8 key bytes (16/24/32 long).
        - `encrypt_iv` set -> fixed-IV ciphertexts compatible with links
          already issued; None -> a random IV per encryption.
    """

    roots: tuple[DriveRoot, ...]
    crypto_base_key: str = field(repr=False)
    hmac_base_key: str = field(repr=False)
    encrypt_iv: Optional[bytes] = field(default=None, repr=False)

    file_link_expiry_days: float = 7
    enable_ip_lock: bool = False
    files_list_page_size: int = 100
    search_result_list_page_size: int = 100
    search_all_drives: bool = True
    login_days: float = 7
    token_safety_margin_sec: int = 100
    download_path: str = "/download.aspx"
    users_list: tuple[Mapping[str, str], ...] = field(default=(), repr=False)
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    def __post_init__(self) -> None:
        if not self.roots:
            raise ConfigError("IndexSettings.roots must not be empty")
        if not all(isinstance(r, DriveRoot) for r in self.roots):
            raise ConfigError("IndexSettings.roots must contain DriveRoot items")
        if len(self.crypto_base_key.encode("utf-8")) not in (16, 24, 32):
            raise ConfigError("crypto_base_key must be 16, 24 or 32 bytes long")
        if not self.hmac_base_key:
            raise ConfigError("hmac_base_key must be a non-empty string")
        if self.encrypt_iv is not None and len(self.encrypt_iv) != 16:
            raise ConfigError("encrypt_iv must be 16 bytes")
        if self.file_link_expiry_days <= 0:
            raise ConfigError("file_link_expiry_days must be positive")
        if self.login_days <= 0:
            raise ConfigError("login_days must be positive")
        for name in ("files_list_page_size", "search_result_list_page_size"):
            value = getattr(self, name)
            if not isinstance(value, int) or not 1 <= value <= 1000:
                raise ConfigError(f"{name} must be an int in 1..1000")
        if self.token_safety_margin_sec < 0:
            raise ConfigError("token_safety_margin_sec must be >= 0")

    @property
    def root_ids(self) -> list[str]:
        return [r.id for r in self.roots]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "IndexSettings":
        """
        Build settings from a plain config mapping.

        Shape::

            {
              "crypto_base_key": "...", "hmac_base_key": "...",
              "encrypt_iv": [1, 2, ...] | "hex" | None,
              "auth": {"client_id": ..., "client_secret": ..., "refresh_token": ...,
                       "service_account_json": {...}, "roots": [...],
                       "file_link_expiry": 7, "enable_ip_lock": False, ...},
            }

        A root may carry its own "auth" block; otherwise the top-level one is used.
        """
        auth = data.get("auth") or {}
        if not isinstance(auth, Mapping):
            raise ConfigError("'auth' must be a mapping")

        raw_roots = auth.get("roots") or data.get("roots") or []
        roots = tuple(_root_from_mapping(r, auth) for r in raw_roots)

        kwargs: dict[str, Any] = {}
        for key, target in _AUTH_KEYS.items():
            if key in auth:
                kwargs[target] = auth[key]
        if "download_path" in data:
            kwargs["download_path"] = data["download_path"]
        if "users_list" in auth:
            kwargs["users_list"] = tuple(auth["users_list"])
        if isinstance(data.get("retry"), Mapping):
            kwargs["retry"] = RetryPolicy(**data["retry"])

        return cls(
            roots=roots,
            crypto_base_key=str(data.get("crypto_base_key", "")),
            hmac_base_key=str(data.get("hmac_base_key", "")),
            encrypt_iv=_parse_iv(data.get("encrypt_iv")),
            **kwargs,
        )


_AUTH_KEYS: dict[str, str] = {
    "file_link_expiry": "file_link_expiry_days",
    "enable_ip_lock": "enable_ip_lock",
    "files_list_page_size": "files_list_page_size",
    "search_result_list_page_size": "search_result_list_page_size",
    "search_all_drives": "search_all_drives",
    "login_days": "login_days",
    "token_safety_margin_sec": "token_safety_margin_sec",
}


def _root_from_mapping(data: Mapping[str, Any], default_auth: Mapping[str, Any]) -> DriveRoot:
    if not isinstance(data, Mapping):
        raise ConfigError("each root must be a mapping")
    auth = data.get("auth") or default_auth
    return DriveRoot(
        id=data.get("id", ""),
        name=data.get("name", ""),
        auth_binding=credential_from_mapping(auth),
        protect_link=bool(data.get("protect_file_link", False)),
    )


def _parse_iv(value: Any) -> Optional[bytes]:
    if value is None or value == "":
        return None
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        try:
            return bytes.fromhex(value)
        except ValueError as exc:
            raise ConfigError("encrypt_iv hex string is invalid", cause=exc) from exc
    if isinstance(value, Sequence):
        try:
            return bytes(value)
        except (TypeError, ValueError) as exc:
            raise ConfigError("encrypt_iv must be a list of byte values", cause=exc) from exc
    raise ConfigError("encrypt_iv has an unsupported type")
