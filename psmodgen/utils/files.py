from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import codecs
import os


@dataclass(frozen=True)
class TextFile:
    """Decoded file text with LF line endings, plus what is needed to write it back the same way."""
    text: str
    encoding: str = "utf-8"
    newline: str = "\n"


def decode(raw: bytes) -> tuple[str, str]:
    """PowerShell sources are UTF-8 (with or without BOM) or UTF-16 with a BOM."""
    if raw.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return raw.decode("utf-16"), "utf-16"
    if raw.startswith(codecs.BOM_UTF8):
        return raw.decode("utf-8-sig"), "utf-8-sig"
    return raw.decode("utf-8"), "utf-8"


def read_text_file(path: Path) -> TextFile:
    text, encoding = decode(Path(path).read_bytes())
    newline = "\r\n" if "\r\n" in text else "\n"
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return TextFile(text=text, encoding=encoding, newline=newline)


def atomic_write_text(path: Path, text: str, newline: str = "\n", encoding: str = "utf-8") -> Path:
    """Write the full replacement next to the target and swap it in, so readers never see a partial file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = text.replace("\r\n", "\n").replace("\n", newline).encode(encoding)
    tmp = path.with_name(path.name + f".tmp.{os.getpid()}")
    try:
        tmp.write_bytes(data)
        os.replace(tmp, path)
    finally:
        if tmp.exists():
            tmp.unlink()
    return path
