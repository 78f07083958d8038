from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides the OS-specific application data directory and path
normalization helpers shared by the settings and logging layers.
"""

import os
from typing import Optional

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "SteamShelf"
UNIX_APP_DIR_NAME = ".steamshelf"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/SteamShelf
    - Linux/Mac: ~/.steamshelf

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    # Windows specific resolution
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    # Posix fallback (Linux/Mac)
    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    # Idempotent directory creation
    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        pass

    return os.path.abspath(path)


def normalize_path(path: Optional[str]) -> str:
    """
    Normalize a user-supplied path into an absolute filesystem path.

    Expands environment variables ($VAR/%VAR%) and the home shortcut (~/).
    Empty input yields an empty string so callers can treat it as 'unset'.

    Args:
        path: Raw input path string.

    Returns:
        str: Normalized absolute path, or "" when the input is blank.
    """
    p = (path or "").strip()
    if not p:
        return ""
    return os.path.abspath(os.path.expandvars(os.path.expanduser(p)))
