# src/fastodo/utils/config.py
import json
from pathlib import Path
from typing import Any, Dict, Optional
from .paths import config_dir

_DEFAULTS: Dict[str, Any] = {
    "views": {
        "task_sort": None,               # None | "dueDate" | "priority" | "title"
        "task_filter_completed": None,   # None | false | true
        "note_sort": None,               # None | "updated" | "created" | "title"
    },
    "folders": {
        "default_name": "My Tasks",
    },
}


def settings_file() -> Path:
    return config_dir() / "settings.json"


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = {k: (dict(v) if isinstance(v, dict) else v) for k, v in base.items()}
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    path = path or settings_file()
    if path.exists():
        try:
            data = json.loads(path.read_text())
        except (OSError, ValueError):
            return _merge(_DEFAULTS, {})
        if isinstance(data, dict):
            return _merge(_DEFAULTS, data)
    return _merge(_DEFAULTS, {})


def save_settings(data: Dict[str, Any], path: Optional[Path] = None) -> None:
    path = path or settings_file()
    path.write_text(json.dumps(data, indent=2))

# Rev 0.1.0
