"""Public crypto exports for gdindex."""

from __future__ import annotations

from .assertion import build_service_account_assertion
from .cipher import AesCbcCipher
from .integrity import canonical, compute_mac, verify_mac
from .links import CapabilityLinkCodec, DownloadCapability, LinkClaims
from .session import SessionClaims, SessionCodec

__all__ = [
    "AesCbcCipher",
    "compute_mac",
    "verify_mac",
    "canonical",
    "build_service_account_assertion",
    "CapabilityLinkCodec",
    "DownloadCapability",
    "LinkClaims",
    "SessionCodec",
    "SessionClaims",
]
