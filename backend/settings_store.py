from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path

from .settings import Settings

log = logging.getLogger("recibowatch.settings")

APP_DIRNAME = "recibowatch"
FILENAME = "settings.json"


def _local_config_dir() -> Path:
    """Config location: inside the app folder (backend/.recibowatch/).

    Override with RECIBOWATCH_CONFIG_DIR (tests and packaged installs use it).
    """
    env_dir = (os.environ.get("RECIBOWATCH_CONFIG_DIR") or "").strip()
    if env_dir:
        return Path(env_dir).expanduser().resolve()

    # If bundled (PyInstaller, etc.), store next to the executable
    if getattr(sys, "frozen", False):
        exe_dir = Path(sys.executable).resolve().parent
        return exe_dir / f".{APP_DIRNAME}"

    backend_dir = Path(__file__).resolve().parent
    return backend_dir / f".{APP_DIRNAME}"


def _config_path() -> Path:
    cfg_dir = _local_config_dir()
    cfg_dir.mkdir(parents=True, exist_ok=True)
    return cfg_dir / FILENAME


def _read_settings_file(path: Path) -> dict:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as e:
        # A corrupt file must not take the app down; defaults apply.
        log.warning("Ignoring unreadable settings file %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def load_settings() -> Settings:
    """Load settings from the config dir, falling back to defaults."""
    data = _read_settings_file(_config_path())

    s = Settings()
    for k, v in data.items():
        if hasattr(s, k):
            setattr(s, k, v)
    return s


def save_settings(settings: Settings) -> None:
    """Save settings to the config dir."""
    path = _config_path()
    tmp = path.with_suffix(".tmp")

    data = asdict(settings)
    # Write atomically (reduce risk of partial writes)
    tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)
