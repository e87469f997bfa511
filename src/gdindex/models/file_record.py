"""Data model for Drive items."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from gdindex.util.mime import is_folder
from gdindex.util.time import parse_rfc3339, to_rfc3339


@dataclass(slots=True, frozen=True)
class FileRecord:
    """
    Snapshot of a Drive item as returned by one request.

    Notes:
        - `id` is the raw Drive identifier and must not leave the package
          unwrapped (see PublicFileRecord).
        - `parent_ids` keeps Drive's order; only the first entry is used for
          reverse path resolution.
    """

    id: str
    name: str
    mime_type: str
    parent_ids: tuple[str, ...] = ()

    size: Optional[int] = None
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    drive_id: Optional[str] = None
    file_extension: Optional[str] = None

    @property
    def is_folder(self) -> bool:
        return is_folder(self.mime_type)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "FileRecord":
        """Build a record from a Drive v3 `files` resource dict."""
        file_id = data.get("id")
        name = data.get("name", "")
        mime_type = data.get("mimeType", "")
        parents = data.get("parents") or []

        size = None
        if isinstance(data.get("size"), str) and data["size"].isdigit():
            size = int(data["size"])
        elif isinstance(data.get("size"), int):
            size = data["size"]

        drive_id = data.get("driveId")
        extension = data.get("fileExtension")

        return cls(
            id=file_id if isinstance(file_id, str) else "",
            name=name if isinstance(name, str) else "",
            mime_type=mime_type if isinstance(mime_type, str) else "",
            parent_ids=tuple(p for p in parents if isinstance(p, str)),
            size=size,
            created_at=_parse_time(data.get("createdTime")),
            modified_at=_parse_time(data.get("modifiedTime")),
            drive_id=drive_id if isinstance(drive_id, str) else None,
            file_extension=extension if isinstance(extension, str) else None,
        )


@dataclass(slots=True, frozen=True)
class PublicFileRecord:
    """A FileRecord safe to hand to the web layer: every id is encrypted."""

    id: str
    name: str
    mime_type: str
    drive_id: str = ""
    size: Optional[int] = None
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    file_extension: Optional[str] = None
    link: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "driveId": self.drive_id,
            "name": self.name,
            "mimeType": self.mime_type,
        }
        if self.size is not None:
            out["size"] = str(self.size)
        if self.modified_at is not None:
            out["modifiedTime"] = to_rfc3339(self.modified_at)
        if self.created_at is not None:
            out["createdTime"] = to_rfc3339(self.created_at)
        if self.file_extension is not None:
            out["fileExtension"] = self.file_extension
        if self.link is not None:
            out["link"] = self.link
        return out


def _parse_time(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        return parse_rfc3339(value)
    except ValueError:
        return None
