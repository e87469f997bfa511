"""Field definitions and query constants for Google Drive API requests."""

from __future__ import annotations

DRIVE_API_BASE: str = "https://www.googleapis.com/drive/v3"

FILE_FIELDS: str = (
    "id,"
    "name,"
    "mimeType,"
    "parents,"
    "modifiedTime,"
    "createdTime,"
    "size,"
    "driveId,"
    "fileExtension"
)

LIST_FIELDS: str = f"nextPageToken,files({FILE_FIELDS})"
LOOKUP_FIELDS: str = f"files({FILE_FIELDS})"

# folders first, then by name, newest first among equals
LIST_ORDER_BY: str = "folder,name,modifiedTime desc"
