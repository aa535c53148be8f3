from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import re
from typing import Literal

from psmodgen.core.errors import ModulePathError, VersionFormatError
from psmodgen.parsing.ir import ModuleDescriptor
from psmodgen.utils.files import atomic_write_text, read_text_file

Part = Literal["major", "minor", "patch"]
PARTS: tuple[str, ...] = ("major", "minor", "patch")

_VERSION_RE = re.compile(r"^\d+(\.\d+){1,3}$")
_MODULE_VERSION_RE = re.compile(
    r"""^(?P<lead>[ \t]*ModuleVersion[ \t]*=[ \t]*)(?P<q>['"])(?P<version>[^'"]*)(?P=q)""",
    re.IGNORECASE | re.MULTILINE,
)


@dataclass(frozen=True)
class VersionChange:
    module: str
    old: str
    new: str
    written: bool


def parse_version(text: str) -> tuple[int, ...]:
    """Parse a 2 to 4 part numeric version; missing parts are padded with 0 so 1.0 == 1.0.0."""
    text = (text or "").strip()
    if not _VERSION_RE.match(text):
        raise VersionFormatError(f"Not a module version: {text!r}")
    parts = tuple(int(p) for p in text.split("."))
    return parts + (0,) * (4 - len(parts))


def bump_version(version: str, part: str) -> str:
    if part not in PARTS:
        raise VersionFormatError(f"Unknown version part {part!r}; expected one of {', '.join(PARTS)}")
    major, minor, patch, _ = parse_version(version)
    if part == "major":
        return f"{major + 1}.0.0"
    if part == "minor":
        return f"{major}.{minor + 1}.0"
    return f"{major}.{minor}.{patch + 1}"


def read_module_version(manifest_path: Path) -> str:
    if not manifest_path.exists():
        raise ModulePathError(manifest_path, "Module manifest")
    m = _MODULE_VERSION_RE.search(read_text_file(manifest_path).text)
    if not m:
        raise VersionFormatError(f"ModuleVersion not found in {manifest_path}")
    return m.group("version")


def bump_module_version(module: ModuleDescriptor, part: str, dry_run: bool = False) -> VersionChange:
    path = module.manifest_path
    if not path.exists():
        raise ModulePathError(path, "Module manifest")
    current = read_text_file(path)
    m = _MODULE_VERSION_RE.search(current.text)
    if not m:
        raise VersionFormatError(f"ModuleVersion not found in {path}")

    old = m.group("version")
    new = bump_version(old, part)
    if not dry_run:
        start, end = m.span("version")
        atomic_write_text(path, current.text[:start] + new + current.text[end:],
                          newline=current.newline, encoding=current.encoding)
    return VersionChange(module=module.name, old=old, new=new, written=not dry_run)
