"""Capability links: encrypted file id + expiry, bound by an HMAC tag."""

from __future__ import annotations

import binascii
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Optional
from urllib.parse import urlencode

from loguru import logger

from gdindex.util.time import now_epoch_ms

from .cipher import AesCbcCipher
from .integrity import canonical, compute_mac, verify_mac

# Every failure mode of decoding a token collapses to "invalid".
DECODE_ERRORS: tuple[type[BaseException], ...] = (
    ValueError,
    TypeError,
    binascii.Error,
    UnicodeError,
)


@dataclass(slots=True, frozen=True)
class DownloadCapability:
    """
    The transported form of a download capability.

    `file`, `expiry` and `ip` are ciphertexts; `mac` is a hex HMAC over the
    plaintext values.
    """

    file: str
    expiry: str
    mac: str
    ip: Optional[str] = None

    def query_params(self) -> dict[str, str]:
        params = {"file": self.file, "expiry": self.expiry}
        if self.ip is not None:
            params["ip"] = self.ip
        params["mac"] = self.mac
        return params

    def to_url(self, path: str = "/download.aspx") -> str:
        return f"{path}?{urlencode(self.query_params())}"


@dataclass(slots=True, frozen=True)
class LinkClaims:
    file_id: str
    expires_at_ms: int
    bound_ip: Optional[str] = None


class CapabilityLinkCodec:
    """
    Mint and verify download capabilities.

    `verify` returns None for every kind of failure (malformed, undecryptable,
    expired, wrong tag, wrong requester IP) so callers cannot tell them apart.
    """

    def __init__(
        self,
        cipher: AesCbcCipher,
        mac_key: str,
        *,
        clock: Callable[[], int] = now_epoch_ms,
    ) -> None:
        self._cipher = cipher
        self._mac_key = mac_key
        self._clock = clock

    # ----------------------------
    # Opaque ids
    # ----------------------------
    def wrap_id(self, file_id: str) -> str:
        """Encrypt an id for outbound use (no expiry, no tag)."""
        return self._cipher.encrypt(file_id)

    def unwrap_id(self, token: str) -> Optional[str]:
        try:
            return self._cipher.decrypt(token)
        except DECODE_ERRORS:
            return None

    # ----------------------------
    # Download capabilities
    # ----------------------------
    def mint(
        self,
        file_id: str,
        ttl: timedelta,
        *,
        bound_ip: Optional[str] = None,
    ) -> DownloadCapability:
        expires_at = self._clock() + int(ttl.total_seconds() * 1000)
        return self.mint_until(file_id, expires_at, bound_ip=bound_ip)

    def mint_until(
        self,
        file_id: str,
        expires_at_ms: int,
        *,
        bound_ip: Optional[str] = None,
    ) -> DownloadCapability:
        if bound_ip:
            mac = compute_mac(canonical(file_id, expires_at_ms, bound_ip), self._mac_key)
            encrypted_ip: Optional[str] = self._cipher.encrypt(bound_ip)
        else:
            mac = compute_mac(canonical(file_id, expires_at_ms), self._mac_key)
            encrypted_ip = None

        return DownloadCapability(
            file=self._cipher.encrypt(file_id),
            expiry=self._cipher.encrypt(str(expires_at_ms)),
            mac=mac,
            ip=encrypted_ip,
        )

    def verify(
        self,
        capability: DownloadCapability,
        *,
        requester_ip: Optional[str] = None,
    ) -> Optional[LinkClaims]:
        """
        Decrypt, check expiry, then check the tag.

        For an IP-bound capability the decrypted IP must equal `requester_ip`
        when one is supplied.
        """
        try:
            file_id = self._cipher.decrypt(capability.file)
            expires_at = int(self._cipher.decrypt(capability.expiry))
            bound_ip = self._cipher.decrypt(capability.ip) if capability.ip else None
        except DECODE_ERRORS:
            logger.debug("capability rejected: undecodable")
            return None

        if expires_at < self._clock():
            logger.debug("capability rejected: expired")
            return None

        if bound_ip is not None:
            if requester_ip is not None and requester_ip != bound_ip:
                logger.warning("capability rejected: requester ip mismatch")
                return None
            data = canonical(file_id, expires_at, bound_ip)
        else:
            data = canonical(file_id, expires_at)

        if not verify_mac(data, capability.mac, self._mac_key):
            logger.warning("capability rejected: integrity check failed")
            return None

        return LinkClaims(file_id=file_id, expires_at_ms=expires_at, bound_ip=bound_ip)

    def verify_params(
        self,
        file: Optional[str],
        expiry: Optional[str],
        mac: Optional[str],
        ip: Optional[str] = None,
        *,
        requester_ip: Optional[str] = None,
    ) -> Optional[LinkClaims]:
        """Verify from raw query parameter values; missing values are invalid."""
        if not file or not expiry or not mac:
            return None
        return self.verify(
            DownloadCapability(file=file, expiry=expiry, mac=mac, ip=ip or None),
            requester_ip=requester_ip,
        )
