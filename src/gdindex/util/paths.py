"""Slash-path helpers shared by the resolver and the facade."""

from __future__ import annotations

from urllib.parse import quote, unquote

# Characters left alone by JavaScript's encodeURIComponent, so route paths
# built here match the ones the browser side produces.
_SEGMENT_SAFE = "-_.!~*'()"


def split_segments(path: str) -> list[str]:
    """Split '/a/b/' into ['a', 'b'], ignoring empty segments."""
    return [part for part in path.strip("/").split("/") if part]


def normalize_dir_path(path: str) -> str:
    """Return the canonical directory key: leading and trailing slash."""
    segments = split_segments(path or "/")
    if not segments:
        return "/"
    return "/" + "/".join(segments) + "/"


def split_file_path(path: str) -> tuple[str, str]:
    """
    Split a file path into (directory key, file name segment).

    The file name stays URL-encoded exactly as given; callers decode it.
    """
    segments = split_segments(path)
    if not segments:
        return "/", ""
    name = segments.pop()
    folder = "/" + "/".join(segments) + "/" if segments else "/"
    return folder, name


def encode_segment(name: str) -> str:
    return quote(name, safe=_SEGMENT_SAFE)


def decode_segment(segment: str) -> str:
    return unquote(segment)
