from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from psmodgen.core.errors import ModulePathError
from psmodgen.parsing.ir import ModuleDescriptor
from psmodgen.presets import DEFAULT_SETTINGS

NEWLINES = {"lf": "\n", "crlf": "\r\n"}


@dataclass(frozen=True)
class ModuleSettings:
    extension: str = ".ps1"
    wip_suffix: str = "-wip"
    public_dir: str = "Public"
    private_dir: str = "Private"
    exclude: tuple[str, ...] = ()
    newline: str = "lf"

    @classmethod
    def from_dict(cls, data: dict | None) -> "ModuleSettings":
        d = {**DEFAULT_SETTINGS, **(data or {})}
        ext = str(d["extension"])
        newline = str(d["newline"]).lower()
        if newline not in NEWLINES:
            raise ValueError(f"newline must be one of {sorted(NEWLINES)}, got {newline!r}")
        return cls(
            extension=ext if ext.startswith(".") else f".{ext}",
            wip_suffix=str(d["wip_suffix"] or ""),
            public_dir=str(d["public_dir"]),
            private_dir=str(d["private_dir"]),
            exclude=tuple(d.get("exclude") or ()),
            newline=newline,
        )

    @property
    def line_ending(self) -> str:
        return NEWLINES[self.newline]


@dataclass
class RunConfig:
    root: Path
    modules: List[str] = field(default_factory=list)
    settings: ModuleSettings = field(default_factory=ModuleSettings)

    def resolve_modules(self) -> List[str]:
        """Configured module names, or every child of root that has a public directory."""
        if not self.root.is_dir():
            raise ModulePathError(self.root, "Module root")
        if self.modules:
            return list(self.modules)
        return sorted(
            p.name for p in self.root.iterdir()
            if p.is_dir() and (p / self.settings.public_dir).is_dir()
        )

    def descriptor(self, name: str) -> ModuleDescriptor:
        return ModuleDescriptor.from_base(
            self.root, name,
            public_dir=self.settings.public_dir,
            private_dir=self.settings.private_dir,
        )
