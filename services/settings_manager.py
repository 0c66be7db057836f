"""
Settings Manager - Quan ly load/save ingest settings.

File: ~/.gitmelt/settings.json

API:
    settings = load_ingest_settings()  # -> IngestSettings
    save_ingest_settings(settings)
"""

import json
import threading
from pathlib import Path
from typing import Any, Optional

from config.ingest_settings import IngestSettings
from config.paths import SETTINGS_FILE
from core.logging_config import log_debug, log_warning

# Thread-safe lock de tranh race condition khi save settings
_settings_lock = threading.Lock()


def load_ingest_settings(settings_file: Optional[Path] = None) -> IngestSettings:
    """
    Load settings tu file va tra ve IngestSettings typed instance.

    Neu file khong ton tai hoac loi, tra ve defaults.

    Args:
        settings_file: Duong dan file settings (default: ~/.gitmelt/settings.json)

    Returns:
        IngestSettings instance voi values tu file + defaults
    """
    path = settings_file or SETTINGS_FILE
    try:
        if path.exists():
            saved = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(saved, dict):
                log_debug(f"[Settings] Loaded settings from {path}")
                return IngestSettings.from_dict(saved)
            log_warning(f"[Settings] Ignoring {path}: top-level value is not an object")
    except (OSError, json.JSONDecodeError) as e:
        log_warning(f"[Settings] Could not read {path}: {e}")
    return IngestSettings()


def save_ingest_settings(
    settings: IngestSettings, settings_file: Optional[Path] = None
) -> bool:
    """
    Save IngestSettings ra file (thread-safe).

    Merge voi existing data de bao toan extra keys.

    Returns:
        True neu save thanh cong
    """
    path = settings_file or SETTINGS_FILE
    with _settings_lock:
        try:
            existing_data: dict[str, Any] = {}
            try:
                if path.exists():
                    loaded = json.loads(path.read_text(encoding="utf-8"))
                    if isinstance(loaded, dict):
                        existing_data = loaded
            except (OSError, json.JSONDecodeError):
                pass

            updated = {**existing_data, **settings.to_dict()}
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(updated, indent=2), encoding="utf-8")
            return True
        except OSError as e:
            log_warning(f"[Settings] Could not save {path}: {e}")
            return False
