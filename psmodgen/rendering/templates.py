from __future__ import annotations
import re
from string import Template
from typing import Iterable

from psmodgen.parsing.ir import ExportManifest


class _PsTemplate(Template):
    # "$" belongs to PowerShell inside the skeleton, so placeholders use "%%".
    delimiter = "%%"


LOADER_TEMPLATE = _PsTemplate("""\
# Generated by psmodgen. Add, rename or remove files under %%private_dir/ and %%public_dir/
# and regenerate; manual edits to this file are overwritten.

# Load private functions
foreach ($file in Get-ChildItem -Path (Join-Path $PSScriptRoot '%%private_dir') -Filter '*%%extension' -Recurse -File -ErrorAction SilentlyContinue) {
    try {
        . $file.FullName
    } catch {
        Write-Error "Failed to load private function $($file.FullName): $_"
    }
}

# Load public functions
foreach ($file in Get-ChildItem -Path (Join-Path $PSScriptRoot '%%public_dir') -Filter '*%%extension' -Recurse -File -ErrorAction SilentlyContinue) {
    try {
        . $file.FullName
    } catch {
        Write-Error "Failed to load public function $($file.FullName): $_"
    }
}

$FunctionsToExport = %%function_list

$AliasesToExport = %%alias_list

Export-ModuleMember -Function $FunctionsToExport -Alias $AliasesToExport
""")

FUNCTIONS_FIELD = "FunctionsToExport"
ALIASES_FIELD = "AliasesToExport"


def normalize(text: str) -> str:
    return (text or "").replace("\r\n", "\n").replace("\r", "\n").strip()


def _quote(name: str) -> str:
    return "'" + name.replace("'", "''") + "'"


def render_array(names: Iterable[str], indent: str = "") -> str:
    """Render names as a PowerShell array literal, one element per line."""
    items = list(names)
    if not items:
        return "@()"
    inner = ",\n".join(f"{indent}    {_quote(n)}" for n in items)
    return f"@(\n{inner}\n{indent})"


def render_loader(
    manifest: ExportManifest,
    public_dir: str = "Public",
    private_dir: str = "Private",
    extension: str = ".ps1",
) -> str:
    return LOADER_TEMPLATE.substitute(
        private_dir=private_dir,
        public_dir=public_dir,
        extension=extension,
        function_list=render_array(manifest.functions),
        alias_list=render_array(manifest.aliases),
    )


def _skip_string(text: str, i: int) -> int:
    """Index just past the quoted literal starting at ``text[i]``, or -1 if unterminated."""
    quote = text[i]
    i += 1
    while i < len(text):
        c = text[i]
        if quote == '"' and c == "`":
            i += 2
            continue
        if c == quote:
            if text.startswith(quote, i + 1):
                i += 2
                continue
            return i + 1
        i += 1
    return -1


def _skip_array(text: str, i: int) -> int:
    """Index just past the ``)`` matching the ``@(`` at ``text[i]``, or -1."""
    depth = 0
    i += 1
    while i < len(text):
        c = text[i]
        if c in "'\"":
            i = _skip_string(text, i)
            if i < 0:
                return -1
            continue
        if c == "#":
            nl = text.find("\n", i)
            i = len(text) if nl < 0 else nl
            continue
        if c == "(":
            depth += 1
        elif c == ")":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return -1


def _value_end(text: str, i: int) -> int:
    """End of a field value: one or more comma-separated arrays, strings or $null."""
    end = -1
    while True:
        if text.startswith("@(", i):
            i = _skip_array(text, i)
        elif i < len(text) and text[i] in "'\"":
            i = _skip_string(text, i)
        elif text[i:i + 5].lower() == "$null":
            i += 5
        else:
            return end
        if i < 0:
            return -1
        end = i
        while i < len(text) and text[i] in " \t":
            i += 1
        if not text.startswith(",", i):
            return end
        i += 1
        while i < len(text) and text[i].isspace():
            i += 1


def replace_manifest_field(text: str, field: str, names: Iterable[str]) -> tuple[str, bool]:
    """Replace the value of ``<field> = ...`` in a .psd1 body; other content is left as is.

    The key may start a line or follow ``{`` or ``;``. The whole value is replaced,
    including bare comma-separated lists spread over several lines.
    """
    pattern = re.compile(
        rf"(?:^|(?<=[;{{]))[ \t]*(?P<key>{re.escape(field)})[ \t]*=[ \t]*",
        re.IGNORECASE | re.MULTILINE,
    )
    for m in pattern.finditer(text):
        line_start = text.rfind("\n", 0, m.start("key")) + 1
        prefix = text[line_start:m.start("key")]
        if "#" in prefix:
            continue
        start = m.end()
        end = _value_end(text, start)
        if end < 0:
            continue
        indent = prefix if not prefix.strip() else ""
        return text[:start] + render_array(names, indent=indent) + text[end:], True
    return text, False


def render_manifest(existing: str, manifest: ExportManifest) -> tuple[str, list[str]]:
    """Return the updated .psd1 text and the names of fields that could not be located."""
    text = existing
    missing: list[str] = []
    for field, names in ((FUNCTIONS_FIELD, manifest.functions), (ALIASES_FIELD, manifest.aliases)):
        text, found = replace_manifest_field(text, field, names)
        if not found:
            missing.append(field)
    return text, missing
