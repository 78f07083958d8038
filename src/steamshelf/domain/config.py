from __future__ import annotations

"""
Settings Domain Management.

Handles persistent user preferences (sort order, Steam root override,
diagnostics toggles) stored as JSON in the user data directory. Missing or
corrupted files fall back to defaults; invalid values are replaced one by
one so a single bad entry never discards the rest.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from steamshelf.domain.constants import CURRENT_SETTINGS_VERSION, DEFAULT_SORT_KEY, SORT_KEYS
from steamshelf.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
SETTINGS_FILE_NAME = "settings.json"

# Keys renamed since earlier settings files: old name -> new name
_LEGACY_KEYS: Dict[str, str] = {
    "sort": "sort_by",
    "root": "steam_root",
}

_BOOL_FIELDS = ("show_errors", "parallel_scan")


def get_settings_path() -> str:
    return os.path.join(get_user_data_dir(), SETTINGS_FILE_NAME)


def get_default_settings() -> Dict[str, Any]:
    """
    Generate the default settings structure.

    Returns:
        Dict[str, Any]: Default values for every known key.
    """
    return {
        "version": CURRENT_SETTINGS_VERSION,
        "sort_by": DEFAULT_SORT_KEY,
        "steam_root": "",
        "show_errors": False,
        "parallel_scan": False,
    }


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------
def validate_settings(raw: Any) -> Tuple[Dict[str, Any], List[str]]:
    """
    Normalize untrusted settings data against the schema.

    Unknown keys are dropped, legacy keys renamed, and invalid values
    replaced by their defaults.

    Args:
        raw: Data loaded from disk or assembled by the CLI.

    Returns:
        Tuple[Dict[str, Any], List[str]]: (Clean settings, Warnings).
    """
    warnings: List[str] = []
    clean = get_default_settings()

    if not isinstance(raw, dict):
        warnings.append(f"Settings must be an object, got {type(raw).__name__}; using defaults.")
        return clean, warnings

    data = dict(raw)
    for old, new in _LEGACY_KEYS.items():
        if old in data and new not in data:
            data[new] = data.pop(old)

    sort_by = data.get("sort_by", clean["sort_by"])
    if isinstance(sort_by, str) and sort_by.strip().lower() in SORT_KEYS:
        clean["sort_by"] = sort_by.strip().lower()
    else:
        warnings.append(f"Invalid sort_by {sort_by!r}; expected one of {', '.join(SORT_KEYS)}.")

    steam_root = data.get("steam_root", "")
    if steam_root is None:
        steam_root = ""
    if isinstance(steam_root, str):
        clean["steam_root"] = steam_root.strip()
    else:
        warnings.append(f"Invalid steam_root {steam_root!r}; expected a path string.")

    for key in _BOOL_FIELDS:
        value = data.get(key, clean[key])
        if isinstance(value, bool):
            clean[key] = value
        else:
            warnings.append(f"Invalid {key} {value!r}; expected true or false.")

    return clean, warnings


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_settings(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load settings from disk.

    Args:
        path: Settings file; defaults to the user data directory location.

    Returns:
        Dict[str, Any]: Validated settings, or defaults on any failure.
    """
    settings_path = path or get_settings_path()

    if not os.path.exists(settings_path):
        logger.debug("Settings file not found. Returning defaults.")
        return get_default_settings()

    try:
        with open(settings_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load settings: {e}. Using defaults.")
        return get_default_settings()

    settings, warnings = validate_settings(data)
    for w in warnings:
        logger.warning(f"Settings: {w}")
    return settings


def save_settings(settings: Dict[str, Any], path: Optional[str] = None) -> bool:
    """
    Persist settings to disk after validation.

    Returns:
        bool: True if the file was written.
    """
    settings_path = path or get_settings_path()
    clean, _ = validate_settings(settings)
    clean["version"] = CURRENT_SETTINGS_VERSION

    try:
        os.makedirs(os.path.dirname(os.path.abspath(settings_path)), exist_ok=True)
        with open(settings_path, "w", encoding="utf-8") as f:
            json.dump(clean, f, ensure_ascii=False, indent=4)
    except OSError as e:
        logger.error(f"Failed to save settings: {e}")
        return False

    logger.debug(f"Settings saved to {settings_path}")
    return True
