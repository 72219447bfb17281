"""User settings and data paths for StreamVault."""
import json
import os
from pathlib import Path
from typing import Any, Dict

from streamvault.config import DEFAULT_ACCENT_COLOR


def _data_dir() -> Path:
    override = os.environ.get("STREAMVAULT_HOME")
    if override:
        return Path(override)
    return Path.home() / ".streamvault"


DATA_DIR = _data_dir()
SETTINGS_PATH = DATA_DIR / "settings.json"
DATABASE_PATH = DATA_DIR / "streamvault.db"
SKIP_DATA_PATH = DATA_DIR / "skip_intervals.json"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "accent_color": DEFAULT_ACCENT_COLOR,
    "skip_data_path": str(SKIP_DATA_PATH),
}


def load_settings(path: Path = None) -> Dict[str, Any]:
    """Loads settings from disk, filling in defaults for missing keys."""
    path = path or SETTINGS_PATH
    settings = dict(DEFAULT_SETTINGS)
    if path.exists():
        try:
            with open(path, 'r', encoding='utf-8') as f:
                stored = json.load(f)
            if isinstance(stored, dict):
                settings.update(stored)
        except (json.JSONDecodeError, OSError) as e:
            print(f"Could not read settings from {path}: {e}")
    return settings


def save_settings(settings: Dict[str, Any], path: Path = None) -> None:
    """Persists settings as JSON."""
    path = path or SETTINGS_PATH
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(settings, f, indent=2)
    except OSError as e:
        print(f"Could not save settings to {path}: {e}")
