"""Public resolver exports for gdindex."""

from __future__ import annotations

from .path_resolver import PathResolver

__all__ = ["PathResolver"]
