from __future__ import annotations
from pathlib import Path


class PsModGenError(Exception):
    """Base class for errors that abort work on a single module."""


class ModulePathError(PsModGenError):
    def __init__(self, path: Path, what: str = "Required path"):
        self.path = Path(path)
        super().__init__(f"{what} not found: {self.path}")


class VersionFormatError(PsModGenError):
    pass


class GalleryError(PsModGenError):
    pass


class PowerShellNotFound(PsModGenError):
    pass
