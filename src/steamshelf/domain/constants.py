from __future__ import annotations

"""
Domain Constants and Static Data Structures.

Centralizes the Steam filesystem layout, well-known installation paths,
StateFlags bit values and settings versioning.
"""

import re
from enum import IntFlag
from functools import reduce
from operator import or_
from typing import Dict, List, Tuple

CURRENT_SETTINGS_VERSION = "1.0.0"

# -----------------------------------------------------------------------------
# STEAM FILESYSTEM LAYOUT
# -----------------------------------------------------------------------------

STEAMAPPS_DIR = "steamapps"
COMMON_DIR = "common"

# Registry locations relative to the Steam root, in lookup order.
LIBRARY_REGISTRY_PATHS: Tuple[Tuple[str, ...], ...] = (
    ("steamapps", "libraryfolders.vdf"),
    ("config", "libraryfolders.vdf"),
)

MANIFEST_NAME_RX = re.compile(r"^appmanifest_(\d+)\.acf$", re.IGNORECASE)

LAUNCH_URI_TEMPLATE = "steam://rungameid/{app_id}"

# Ordered candidate roots per OS family. '~' is expanded at lookup time.
STEAM_ROOT_CANDIDATES: Dict[str, List[str]] = {
    "win32": [
        "C:/Program Files (x86)/Steam",
        "C:/Program Files/Steam",
    ],
    "darwin": [
        "~/Library/Application Support/Steam",
    ],
    "linux": [
        "~/.local/share/Steam",
        "~/.steam/steam",
        "~/.steam/root",
        "~/.var/app/com.valvesoftware.Steam/data/Steam",
        "~/snap/steam/common/.local/share/Steam",
    ],
}

# -----------------------------------------------------------------------------
# STATEFLAGS
# -----------------------------------------------------------------------------

class StateFlags(IntFlag):
    """Bits of the 'StateFlags' field in an app manifest."""
    Invalid = 0
    Uninstalled = 1
    UpdateRequired = 2
    FullyInstalled = 4
    Encrypted = 8
    Locked = 16
    FilesMissing = 32
    AppRunning = 64
    FilesCorrupt = 128
    UpdateRunning = 256
    UpdatePaused = 512
    UpdateStarted = 1024
    Uninstalling = 2048
    BackupRunning = 4096
    Reconfiguring = 65536
    Validating = 131072
    AddingFiles = 262144
    Preallocating = 524288
    Downloading = 1048576
    Staging = 2097152
    Committing = 4194304
    UpdateStopping = 8388608


# Masks are plain ints so that '~mask' keeps bits outside the enum.
KNOWN_FLAGS_MASK: int = reduce(or_, (int(f) for f in StateFlags), 0)

# Bits meaning the game files on disk are incomplete right now.
PARTIAL_FLAGS_MASK: int = int(
    StateFlags.FilesMissing | StateFlags.FilesCorrupt | StateFlags.Uninstalling
    | StateFlags.AddingFiles | StateFlags.Preallocating | StateFlags.Downloading
    | StateFlags.Staging | StateFlags.Committing
)


def flag_names(flags: int) -> List[str]:
    """Names of the known bits set in a StateFlags value, lowest bit first."""
    if flags <= 0:
        return []
    return [f.name for f in StateFlags if f.value and flags & f.value == f.value]

# -----------------------------------------------------------------------------
# SETTINGS
# -----------------------------------------------------------------------------

SORT_KEYS: List[str] = ["name", "appid", "size"]
DEFAULT_SORT_KEY = "name"
