from __future__ import annotations

"""
Game Launcher Inspection.

Looks at the files in the root of a game's install directory and picks out
the ones that start the game. The platform is only reported when every
launcher found agrees on it.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from steamshelf.domain.models import LaunchInfo, Platform

logger = logging.getLogger(__name__)

NATIVE_EXTENSIONS = ("sh", "x86", "x86_64")
WINE_EXTENSIONS = ("exe",)


# ==============================================================================
# PUBLIC API
# ==============================================================================

def find_launchers(directory: Path) -> LaunchInfo:
    """
    Collect the launchers of an installed game.

    Args:
        directory: Game install directory (Game.install_path).

    Returns:
        LaunchInfo: Launchers sorted by name and their shared platform.
                    A missing or unreadable directory yields no launchers.
    """
    try:
        entries = sorted((p for p in directory.iterdir() if p.is_file()), key=lambda p: p.name)
    except OSError as e:
        logger.debug(f"Cannot inspect {directory}: {e}")
        return LaunchInfo(platform=None)

    launchers = [p for p in entries if is_launcher(p)]
    return LaunchInfo(platform=same_platform(launchers), launchers=launchers)


def is_launcher(path: Path) -> bool:
    if is_uninstall(path):
        return False
    return is_native(path) or is_wine(path) or has_same_name_as_parent_dir(path)


def is_uninstall(path: Path) -> bool:
    """Uninstallers ship next to launchers and must never be offered."""
    return "uninstall" in path.name.lower()


def is_native(path: Path) -> bool:
    return _extension_in(path, NATIVE_EXTENSIONS)


def is_wine(path: Path) -> bool:
    return _extension_in(path, WINE_EXTENSIONS)


def has_same_name_as_parent_dir(path: Path) -> bool:
    """True for 'Game/Game' or 'Game/Game.bin' style executables."""
    parent = path.parent.name
    return bool(parent) and (path.name == parent or path.stem == parent)


def platform_of(path: Path) -> Optional[Platform]:
    if is_native(path):
        return Platform.NATIVE
    if is_wine(path):
        return Platform.WINE
    return None


def same_platform(launchers: Sequence[Path]) -> Optional[Platform]:
    """Return the platform shared by all launchers, or None."""
    platforms: List[Optional[Platform]] = [platform_of(p) for p in launchers]
    if not platforms or platforms[0] is None:
        return None
    first = platforms[0]
    return first if all(p is first for p in platforms) else None


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _extension_in(path: Path, extensions: Sequence[str]) -> bool:
    return path.suffix[1:].lower() in extensions if path.suffix else False
