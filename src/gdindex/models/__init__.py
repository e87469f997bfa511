"""Public model exports for gdindex."""

from __future__ import annotations

from .drive_root import DriveRoot, RootType, SearchScope
from .file_record import FileRecord, PublicFileRecord
from .results import ListPage, PathLookup

__all__ = [
    "DriveRoot",
    "RootType",
    "SearchScope",
    "FileRecord",
    "PublicFileRecord",
    "ListPage",
    "PathLookup",
]
