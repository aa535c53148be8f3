from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

from rich.console import Console
from rich.markup import escape

from psmodgen.core.config import ModuleSettings
from psmodgen.core.errors import PowerShellNotFound
from psmodgen.generation.regenerator import RegenerationResult, regenerate
from psmodgen.integrations.pwsh import ValidationResult, find_powershell, validate_manifest
from psmodgen.parsing.ir import ModuleDescriptor
from psmodgen.versioning.bump import VersionChange, bump_module_version


@dataclass
class BuildResult:
    regeneration: RegenerationResult
    version: Optional[VersionChange] = None
    validation: Optional[ValidationResult] = None
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.validation is None or self.validation.ok


def build_module(
    module: ModuleDescriptor,
    settings: ModuleSettings | None = None,
    bump: str | None = None,
    validate: bool = True,
    console: Console | None = None,
) -> BuildResult:
    """Regenerate, optionally bump the version, then optionally check the manifest with PowerShell."""
    out = console or Console(quiet=True)
    result = BuildResult(regeneration=regenerate(module, settings, console=out))

    if bump:
        result.version = bump_module_version(module, bump)
        out.print(f"  version   {result.version.old} -> {result.version.new}")

    if not validate:
        return result
    if not module.manifest_path.exists():
        result.warnings.append(f"No manifest to validate: {module.manifest_path}")
        return result
    try:
        pwsh = find_powershell()
    except PowerShellNotFound as e:
        result.warnings.append(f"{e} Skipping manifest validation.")
        out.print(f"[yellow]WARNING[/] {escape(str(e))} Skipping manifest validation.")
        return result

    result.validation = validate_manifest(module.manifest_path, pwsh=pwsh)
    style = "green" if result.validation.ok else "red"
    out.print(f"  [{style}]validate[/]  {escape(result.validation.output)}")
    return result
