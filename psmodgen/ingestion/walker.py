from __future__ import annotations
from pathlib import Path
import os
from typing import Optional

import pathspec

from psmodgen.core.errors import ModulePathError
from psmodgen.parsing.aliases import extract_aliases
from psmodgen.parsing.ir import DiscoveryResult, FunctionRecord
from psmodgen.utils.files import decode

HARD_EXCLUDE_DIRS = {".git", ".hg", ".svn", ".vscode", ".idea"}


def _compile_excludes(patterns: list[str]) -> Optional[pathspec.PathSpec]:
    if not patterns:
        return None
    return pathspec.PathSpec.from_lines("gitwildmatch", patterns)


def is_wip(path: Path, wip_suffix: str) -> bool:
    return bool(wip_suffix) and path.stem.lower().endswith(wip_suffix.lower())


def discover_functions(
    public_dir: Path,
    extension: str = ".ps1",
    wip_suffix: str = "-wip",
    exclude: list[str] | None = None,
) -> DiscoveryResult:
    public_dir = Path(public_dir)
    if not public_dir.is_dir():
        raise ModulePathError(public_dir, "Public function directory")

    spec = _compile_excludes(exclude or [])
    ext = extension.lower()
    result = DiscoveryResult()

    def _unreadable_dir(e: OSError) -> None:
        result.warnings.append(f"Skipped unreadable directory {e.filename}: {e}")

    for dirpath, dirnames, filenames in os.walk(public_dir, onerror=_unreadable_dir):
        dir_rel = Path(dirpath).relative_to(public_dir)
        dirnames[:] = sorted(
            d for d in dirnames
            if d not in HARD_EXCLUDE_DIRS
            and not (spec and spec.match_file((dir_rel / d).as_posix() + "/"))
        )

        for fname in sorted(filenames):
            fpath = Path(dirpath, fname)
            if fpath.suffix.lower() != ext:
                continue
            if spec and spec.match_file((dir_rel / fname).as_posix()):
                continue

            try:
                text, _ = decode(fpath.read_bytes())
            except (OSError, UnicodeDecodeError) as e:
                result.warnings.append(f"Skipped unreadable file {fpath}: {e}")
                continue

            result.records.append(FunctionRecord(
                name=fpath.stem,
                path=fpath,
                aliases=extract_aliases(text),
                is_wip=is_wip(fpath, wip_suffix),
            ))

    result.records.sort(key=lambda r: r.path.as_posix())
    return result
