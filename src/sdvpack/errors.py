"""
Exception hierarchy for sdvpack.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class SdvPackError(Exception):
    """Base exception for sdvpack errors."""
    pass


class MissingWorkspaceError(SdvPackError):
    """Raised when no usable workspace root is available."""
    pass


class ConfigFileError(SdvPackError):
    """Raised when an override or ignore document cannot be used."""
    pass


class ScanError(SdvPackError):
    """Raised when a workspace directory cannot be listed."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.path = path


class ArchiveError(SdvPackError):
    """Raised when the zip archive cannot be written or finalized."""
    pass


class DeployError(SdvPackError):
    """Raised when an entry cannot be copied into the mod folder."""

    def __init__(self, message: str, item: Optional[str] = None):
        super().__init__(message)
        self.item = item


class LaunchError(SdvPackError):
    """Raised when the SMAPI launch command cannot be constructed."""
    pass
