from __future__ import annotations
from copy import deepcopy
from pathlib import Path
import yaml

DEFAULT_SETTINGS_FILE = Path("psmodgen.yaml")

DEFAULT_SETTINGS = {
    "extension": ".ps1",
    "wip_suffix": "-wip",
    "public_dir": "Public",
    "private_dir": "Private",
    "exclude": [],
    "modules": [],
    "newline": "lf",
    "gallery": {
        "api_base": "https://www.powershellgallery.com/api/v2",
        "timeout": 30,
    },
}


def _merge(base: dict, override: dict) -> dict:
    out = deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        elif value is not None:
            out[key] = value
    return out


def load_settings(settings_path: Path | None) -> dict:
    p = settings_path or DEFAULT_SETTINGS_FILE
    if not p.exists():
        return deepcopy(DEFAULT_SETTINGS)
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file must contain a mapping: {p}")
    return _merge(DEFAULT_SETTINGS, data)


def save_settings(settings: dict, settings_path: Path | None) -> Path:
    p = settings_path or DEFAULT_SETTINGS_FILE
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(yaml.safe_dump(settings, sort_keys=False), encoding="utf-8")
    return p
