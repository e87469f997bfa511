from __future__ import annotations

FOLDER_MIME: str = "application/vnd.google-apps.folder"
SHORTCUT_MIME: str = "application/vnd.google-apps.shortcut"

# Marker file consumed by the directory password layer; never listed.
PASSWORD_MARKER_NAME: str = ".password"


def is_folder(mime_type: str) -> bool:
    return mime_type == FOLDER_MIME


def is_google_app(mime_type: str) -> bool:
    """
    Returns True if the MIME type is a Google 'apps' type.

    Those items have no binary content; `alt=media` downloads fail for them.
    """
    return mime_type.startswith("application/vnd.google-apps.")
