"""Run PowerShell to check that a regenerated module manifest still loads."""

from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from psmodgen.core.errors import PowerShellNotFound

_WINDOWS_CANDIDATES = [
    r"C:\Program Files\PowerShell\7\pwsh.exe",
    r"C:\Windows\System32\WindowsPowerShell\v1.0\powershell.exe",
]


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    output: str


def find_powershell() -> str:
    for candidate in ["pwsh", "powershell"]:
        path = shutil.which(candidate)
        if path:
            return path

    for candidate in _WINDOWS_CANDIDATES:
        if os.path.isfile(candidate):
            return candidate

    raise PowerShellNotFound("PowerShell not found (looked for pwsh and powershell).")


def validate_manifest(manifest_path: Path, pwsh: str | None = None, timeout: int = 60) -> ValidationResult:
    pwsh = pwsh or find_powershell()
    literal = str(Path(manifest_path).resolve()).replace("'", "''")
    script = (
        "$ErrorActionPreference = 'Stop'\n"
        f"$m = Test-ModuleManifest -Path '{literal}'\n"
        "\"$($m.Name) $($m.Version): $($m.ExportedFunctions.Count) functions, "
        "$($m.ExportedAliases.Count) aliases\""
    )
    try:
        proc = subprocess.run(
            [pwsh, "-NoProfile", "-NonInteractive", "-Command", script],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return ValidationResult(ok=False, output=f"Test-ModuleManifest timed out after {timeout}s")

    output = (proc.stdout if proc.returncode == 0 else proc.stderr or proc.stdout).strip()
    return ValidationResult(ok=proc.returncode == 0, output=output)

