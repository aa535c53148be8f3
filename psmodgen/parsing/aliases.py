from __future__ import annotations
import re

# [Alias('a', "b", c)] anywhere in the text; the token list may span lines.
_ALIAS_RE = re.compile(r"\[\s*Alias\s*\(([^)]*)\)\s*\]", re.IGNORECASE)

_QUOTES = "'\"`"


def _clean(token: str) -> str:
    return token.strip().strip(_QUOTES).strip()


def extract_aliases(text: str) -> tuple[str, ...]:
    """Return alias tokens declared via ``[Alias(...)]`` in first-seen order, de-duplicated."""
    seen: dict[str, None] = {}
    for m in _ALIAS_RE.finditer(text or ""):
        for raw in m.group(1).split(","):
            token = _clean(raw)
            if token and token not in seen:
                seen[token] = None
    return tuple(seen)
