"""Tests for psmodgen.rendering.templates."""

from __future__ import annotations

from psmodgen.parsing.ir import ExportManifest
from psmodgen.rendering.templates import (
    normalize,
    render_array,
    render_loader,
    render_manifest,
    replace_manifest_field,
)
from tests._fixtures.module_builder import MANIFEST_TEMPLATE


def test_render_array_empty_and_populated() -> None:
    assert render_array([]) == "@()"
    assert render_array(["Get-Foo", "Set-Bar"]) == "@(\n    'Get-Foo',\n    'Set-Bar'\n)"


def test_render_array_indents_and_escapes_quotes() -> None:
    assert render_array(["it's"], indent="    ") == "@(\n        'it''s'\n    )"


def test_loader_contains_both_stanzas_and_lists() -> None:
    text = render_loader(ExportManifest(functions=("Get-Foo", "Set-Bar"), aliases=("sb",)))

    private_at = text.index("'Private'")
    public_at = text.index("'Public'")
    assert private_at < public_at
    assert "-Filter '*.ps1'" in text
    assert "$FunctionsToExport = @(\n    'Get-Foo',\n    'Set-Bar'\n)" in text
    assert "$AliasesToExport = @(\n    'sb'\n)" in text
    assert text.rstrip().endswith("Export-ModuleMember -Function $FunctionsToExport -Alias $AliasesToExport")
    assert "%%" not in text


def test_loader_uses_configured_directories_and_extension() -> None:
    text = render_loader(ExportManifest(), public_dir="Exported", private_dir="Internal", extension=".psm")
    assert "'Internal'" in text and "'Exported'" in text
    assert "-Filter '*.psm'" in text
    assert "$AliasesToExport = @()" in text


def test_replace_field_only_touches_that_field() -> None:
    original = MANIFEST_TEMPLATE.replace("{name}", "Mod").replace("{version}", "1.2.3")

    text, found = replace_manifest_field(original, "FunctionsToExport", ["Get-Foo"])

    assert found
    assert "    FunctionsToExport = @(\n        'Get-Foo'\n    )" in text
    assert "CmdletsToExport   = @()" in text
    assert "AliasesToExport   = @()" in text
    assert "ModuleVersion     = '1.2.3'" in text
    assert "Tags = @('fixture')" in text


def test_replace_field_handles_wildcard_string_and_case() -> None:
    original = "@{\n  functionstoexport = '*'\n}\n"
    text, found = replace_manifest_field(original, "FunctionsToExport", ["A"])
    assert found
    assert text == "@{\n  functionstoexport = @(\n      'A'\n  )\n}\n"


def test_replace_field_ignores_commented_lines() -> None:
    original = "@{\n# AliasesToExport = @()\n}\n"
    text, found = replace_manifest_field(original, "AliasesToExport", ["x"])
    assert not found
    assert text == original


def test_replace_field_consumes_bare_comma_separated_list() -> None:
    original = (
        "@{\n"
        "    FunctionsToExport = 'Get-Foo', 'Removed-Fn',\n"
        "        'Other-Fn'\n"
        "    AliasesToExport = 'old1', \"old2\"\n"
        "}\n"
    )

    text, found = replace_manifest_field(original, "FunctionsToExport", ["Get-Foo"])

    assert found
    assert "Removed-Fn" not in text and "Other-Fn" not in text
    assert "    FunctionsToExport = @(\n        'Get-Foo'\n    )\n    AliasesToExport" in text

    text, found = replace_manifest_field(text, "AliasesToExport", [])
    assert found
    assert "    AliasesToExport = @()\n}\n" in text
    assert "old" not in text


def test_replace_field_scans_to_matching_paren() -> None:
    original = (
        "@{\n"
        "    FunctionsToExport = @(\n"
        "        'Get-Foo'   # keep (for now)\n"
        "        'Odd)Name'\n"
        "        \"Set-Bar\"\n"
        "    )\n"
        "    CmdletsToExport = @()\n"
        "}\n"
    )

    text, found = replace_manifest_field(original, "FunctionsToExport", ["New-Fn"])

    assert found
    assert text == (
        "@{\n"
        "    FunctionsToExport = @(\n"
        "        'New-Fn'\n"
        "    )\n"
        "    CmdletsToExport = @()\n"
        "}\n"
    )


def test_replace_field_on_single_line_manifest() -> None:
    original = "@{ FunctionsToExport = @('Gone'); AliasesToExport = 'g' }\n"

    text, missing = render_manifest(original, ExportManifest(functions=("Kept",)))

    assert missing == []
    assert text == "@{ FunctionsToExport = @(\n    'Kept'\n); AliasesToExport = @() }\n"


def test_replace_field_null_value() -> None:
    text, found = replace_manifest_field("@{\n    AliasesToExport = $null\n}\n", "AliasesToExport", ["a"])
    assert found
    assert text == "@{\n    AliasesToExport = @(\n        'a'\n    )\n}\n"


def test_render_manifest_reports_missing_fields() -> None:
    original = "@{\n    FunctionsToExport = @('Old')\n}\n"
    text, missing = render_manifest(original, ExportManifest(functions=("New",), aliases=("n",)))
    assert missing == ["AliasesToExport"]
    assert "'New'" in text and "'Old'" not in text


def test_normalize_line_endings_and_outer_whitespace() -> None:
    assert normalize("\r\n a\r\nb\rc \n\n") == "a\nb\nc"
    assert normalize(None) == ""
