"""Keep a module's generated loader (.psm1) and manifest export fields (.psd1) in sync
with the function files under its public directory.

Each artifact is re-rendered from scratch on every run and compared with what is on
disk after line-ending normalisation. Nothing is written when they match, so running
twice in a row never touches the files the second time. When they differ the whole
file is replaced atomically.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from rich.console import Console
from rich.markup import escape

from psmodgen.core.config import ModuleSettings, RunConfig
from psmodgen.core.errors import PsModGenError
from psmodgen.ingestion.walker import discover_functions
from psmodgen.parsing.ir import ArtifactKind, ExportManifest, GeneratedArtifact, ModuleDescriptor
from psmodgen.rendering.templates import normalize, render_loader, render_manifest
from psmodgen.utils.files import TextFile, atomic_write_text, read_text_file


class ArtifactStatus(str, Enum):
    UNCHANGED = "unchanged"
    UPDATED = "updated"
    CREATED = "created"
    SKIPPED = "skipped"


_STATUS_STYLE = {
    ArtifactStatus.UNCHANGED: "dim",
    ArtifactStatus.UPDATED: "green",
    ArtifactStatus.CREATED: "green",
    ArtifactStatus.SKIPPED: "yellow",
}


@dataclass(frozen=True)
class ArtifactResult:
    kind: ArtifactKind
    path: Path
    status: ArtifactStatus


@dataclass
class RegenerationResult:
    module: str
    files_scanned: int = 0
    wip_excluded: int = 0
    manifest: ExportManifest = field(default_factory=ExportManifest)
    artifacts: list[ArtifactResult] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def files_updated(self) -> int:
        return sum(1 for a in self.artifacts if a.status in (ArtifactStatus.UPDATED, ArtifactStatus.CREATED))

    @property
    def changed(self) -> bool:
        return self.files_updated > 0

    def status_of(self, kind: ArtifactKind) -> Optional[ArtifactStatus]:
        for a in self.artifacts:
            if a.kind == kind:
                return a.status
        return None


@dataclass
class BatchResult:
    results: list[RegenerationResult] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


def write_if_changed(artifact: GeneratedArtifact, existing: Optional[TextFile], newline: str) -> ArtifactStatus:
    if existing is not None and normalize(existing.text) == normalize(artifact.content):
        return ArtifactStatus.UNCHANGED
    body = normalize(artifact.content) + "\n"
    if existing is None:
        atomic_write_text(artifact.path, body, newline=newline)
        return ArtifactStatus.CREATED
    atomic_write_text(artifact.path, body, newline=existing.newline, encoding=existing.encoding)
    return ArtifactStatus.UPDATED


def _read_existing(path: Path) -> Optional[TextFile]:
    if not path.exists():
        return None
    try:
        return read_text_file(path)
    except UnicodeDecodeError as e:
        raise PsModGenError(f"Cannot decode existing artifact {path}: {e}") from e


def regenerate(
    module: ModuleDescriptor,
    settings: ModuleSettings | None = None,
    console: Console | None = None,
) -> RegenerationResult:
    settings = settings or ModuleSettings()
    out = console or Console(quiet=True)

    # Raises ModulePathError before anything is rendered or written.
    found = discover_functions(
        module.public_dir,
        extension=settings.extension,
        wip_suffix=settings.wip_suffix,
        exclude=list(settings.exclude),
    )
    result = RegenerationResult(
        module=module.name,
        files_scanned=len(found.records),
        wip_excluded=len(found.wip),
        manifest=ExportManifest.from_records(found.records),
        warnings=list(found.warnings),
    )
    for w in found.warnings:
        out.print(f"[yellow]WARNING[/] {escape(w)}")
    out.print(
        f"{escape('[' + module.name + ']')} {len(result.manifest.functions)} functions, "
        f"{len(result.manifest.aliases)} aliases ({result.wip_excluded} work-in-progress skipped)"
    )

    loader = GeneratedArtifact(
        kind="loader",
        path=module.loader_path,
        content=render_loader(
            result.manifest,
            public_dir=settings.public_dir,
            private_dir=settings.private_dir,
            extension=settings.extension,
        ),
    )
    status = write_if_changed(loader, _read_existing(loader.path), settings.line_ending)
    result.artifacts.append(ArtifactResult("loader", loader.path, status))

    try:
        existing_manifest = _read_existing(module.manifest_path)
        problem = "Manifest not found"
    except PsModGenError:
        existing_manifest = None
        problem = "Manifest is not valid UTF-8/UTF-16 text"
    if existing_manifest is None:
        msg = f"{problem}, export lists not updated: {module.manifest_path}"
        result.warnings.append(msg)
        out.print(f"[yellow]WARNING[/] {escape(msg)}")
        result.artifacts.append(ArtifactResult("manifest", module.manifest_path, ArtifactStatus.SKIPPED))
    else:
        text, missing = render_manifest(existing_manifest.text, result.manifest)
        for fld in missing:
            msg = f"{fld} not found in {module.manifest_path.name}; field left untouched"
            result.warnings.append(msg)
            out.print(f"[yellow]WARNING[/] {escape(msg)}")
        manifest = GeneratedArtifact(kind="manifest", path=module.manifest_path, content=text)
        status = write_if_changed(manifest, existing_manifest, settings.line_ending)
        result.artifacts.append(ArtifactResult("manifest", manifest.path, status))

    for a in result.artifacts:
        style = _STATUS_STYLE[a.status]
        out.print(f"  [{style}]{a.status.value:<9}[/] {a.path.name}")
    return result


def regenerate_all(
    config: RunConfig,
    names: Iterable[str] | None = None,
    console: Console | None = None,
) -> BatchResult:
    """Regenerate modules one after another; a failing module does not stop the batch."""
    out = console or Console(quiet=True)
    batch = BatchResult()
    for name in (list(names) if names else config.resolve_modules()):
        try:
            batch.results.append(regenerate(config.descriptor(name), config.settings, console=out))
        except (PsModGenError, OSError) as e:
            batch.failures[name] = str(e)
            out.print(f"[red]FAILED[/] {escape(name)}: {escape(str(e))}")
    return batch
