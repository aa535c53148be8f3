from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Literal

ArtifactKind = Literal["loader", "manifest"]


@dataclass(frozen=True)
class ModuleDescriptor:
    name: str
    root: Path
    public_dir: Path
    private_dir: Path

    @classmethod
    def from_base(
        cls,
        base: Path,
        name: str,
        public_dir: str = "Public",
        private_dir: str = "Private",
    ) -> "ModuleDescriptor":
        root = Path(base) / name
        return cls(name=name, root=root, public_dir=root / public_dir, private_dir=root / private_dir)

    @property
    def loader_path(self) -> Path:
        return self.root / f"{self.name}.psm1"

    @property
    def manifest_path(self) -> Path:
        return self.root / f"{self.name}.psd1"


@dataclass(frozen=True)
class FunctionRecord:
    name: str
    path: Path
    aliases: tuple[str, ...] = ()
    is_wip: bool = False


@dataclass(frozen=True)
class ExportManifest:
    functions: tuple[str, ...] = ()
    aliases: tuple[str, ...] = ()

    @classmethod
    def from_records(cls, records: Iterable[FunctionRecord]) -> "ExportManifest":
        # ordinal, case-sensitive sort: output must not depend on enumeration order
        functions: set[str] = set()
        aliases: set[str] = set()
        for rec in records:
            if rec.is_wip:
                continue
            functions.add(rec.name)
            aliases.update(rec.aliases)
        return cls(functions=tuple(sorted(functions)), aliases=tuple(sorted(aliases)))


@dataclass(frozen=True)
class GeneratedArtifact:
    kind: ArtifactKind
    path: Path
    content: str


@dataclass
class DiscoveryResult:
    records: list[FunctionRecord] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def exported(self) -> list[FunctionRecord]:
        return [r for r in self.records if not r.is_wip]

    @property
    def wip(self) -> list[FunctionRecord]:
        return [r for r in self.records if r.is_wip]
