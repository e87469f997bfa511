"""Internal controller exports for gdindex."""

from __future__ import annotations

from .drive_controller import DriveController

__all__ = ["DriveController"]
