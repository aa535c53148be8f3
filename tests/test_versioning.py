"""Tests for psmodgen.versioning.bump."""

from __future__ import annotations

import pytest

from psmodgen.core.errors import ModulePathError, VersionFormatError
from psmodgen.parsing.ir import ModuleDescriptor
from psmodgen.versioning.bump import bump_module_version, bump_version, parse_version, read_module_version
from tests._fixtures.module_builder import ModuleBuilder


@pytest.mark.parametrize(
    "old, part, new",
    [
        ("1.2.3", "patch", "1.2.4"),
        ("1.2.3", "minor", "1.3.0"),
        ("1.2.3", "major", "2.0.0"),
        ("1.2", "patch", "1.2.1"),
        ("1.2.3.4", "patch", "1.2.4"),
    ],
)
def test_bump_version(old: str, part: str, new: str) -> None:
    assert bump_version(old, part) == new


def test_bump_version_rejects_bad_input() -> None:
    with pytest.raises(VersionFormatError):
        bump_version("1.2.3", "build")
    with pytest.raises(VersionFormatError):
        bump_version("1.x", "patch")
    with pytest.raises(VersionFormatError):
        bump_version("1.0.0-beta", "patch")


def test_parse_version_pads_like_powershell() -> None:
    assert parse_version("1.2") == (1, 2, 0, 0)
    assert parse_version("1.2.0") == parse_version("1.2")
    assert parse_version("1.10.0") > parse_version("1.9.9")


def test_bump_module_version_rewrites_only_the_version(module_builder: ModuleBuilder) -> None:
    desc = module_builder.module("Mod", version="0.4.9")
    before = desc.manifest_path.read_text(encoding="utf-8")

    change = bump_module_version(desc, "patch")

    after = desc.manifest_path.read_text(encoding="utf-8")
    assert (change.old, change.new, change.written) == ("0.4.9", "0.4.10", True)
    assert after == before.replace("'0.4.9'", "'0.4.10'")
    assert read_module_version(desc.manifest_path) == "0.4.10"


def test_dry_run_leaves_manifest_untouched(module_builder: ModuleBuilder) -> None:
    desc = module_builder.module("Mod", version="2.0.0")
    before = desc.manifest_path.read_bytes()

    change = bump_module_version(desc, "major", dry_run=True)

    assert change.new == "3.0.0"
    assert not change.written
    assert desc.manifest_path.read_bytes() == before


def test_missing_manifest_or_version(module_builder: ModuleBuilder) -> None:
    desc = module_builder.module("NoManifest", manifest=False)
    with pytest.raises(ModulePathError):
        bump_module_version(desc, "patch")

    desc.manifest_path.write_text("@{ Author = 'x' }", encoding="utf-8")
    with pytest.raises(VersionFormatError):
        read_module_version(desc.manifest_path)


def test_double_quoted_version(tmp_path) -> None:
    desc = ModuleDescriptor.from_base(tmp_path, "Dq")
    desc.root.mkdir()
    desc.manifest_path.write_text('@{\n    ModuleVersion = "1.0.0"\n}\n', encoding="utf-8")

    bump_module_version(desc, "minor")

    assert 'ModuleVersion = "1.1.0"' in desc.manifest_path.read_text(encoding="utf-8")
