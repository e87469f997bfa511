"""Configured drive roots."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

from gdindex.auth.credentials import CredentialRef
from gdindex.errors import ConfigError


class RootType(IntEnum):
    """Whether a root is the account's own drive or a shared drive/folder."""

    USER_DRIVE = 0
    SHARED_DRIVE = 1


class SearchScope(str, Enum):
    """Drive `corpora` values used to restrict a search."""

    USER = "user"
    DRIVE = "drive"
    ALL_DRIVES = "allDrives"


@dataclass(slots=True, frozen=True)
class DriveRoot:
    """
    A top-level folder or drive under which one resolver's paths are relative.

    Immutable for the lifetime of the resolver bound to it.
    """

    id: str
    name: str
    auth_binding: CredentialRef
    protect_link: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise ConfigError("DriveRoot.id must be a non-empty string")
        if not isinstance(self.name, str):
            raise ConfigError("DriveRoot.name must be a string")
