from __future__ import annotations

"""
Steam Installation Locator.

Resolves the Steam root directory from the well-known install locations of
each operating system family. The first candidate that exists as a
directory wins.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Iterable, List, Optional

from steamshelf.domain.constants import STEAM_ROOT_CANDIDATES
from steamshelf.domain.errors import SteamNotFoundError
from steamshelf.infra.fs import normalize_path

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def platform_family(platform: Optional[str] = None) -> str:
    """Collapse a sys.platform value into 'win32', 'darwin' or 'linux'."""
    plat = platform or sys.platform
    if plat.startswith(("win", "cygwin", "msys")):
        return "win32"
    if plat == "darwin":
        return "darwin"
    return "linux"


def candidate_paths(platform: Optional[str] = None) -> List[Path]:
    """
    Build the ordered list of candidate Steam roots for a platform.

    Args:
        platform: sys.platform style identifier. Defaults to the running OS.

    Returns:
        List[Path]: Absolute candidate paths with '~' expanded.
    """
    family = platform_family(platform)
    return [Path(os.path.expanduser(p)) for p in STEAM_ROOT_CANDIDATES[family]]


def locate_root(
        candidates: Optional[Iterable[Path]] = None,
        platform: Optional[str] = None,
) -> Path:
    """
    Return the first candidate that is an existing directory.

    Args:
        candidates: Explicit candidate list; platform defaults are used if None.
        platform: sys.platform style identifier used to pick the defaults.

    Returns:
        Path: Absolute Steam installation root.

    Raises:
        SteamNotFoundError: If no candidate exists.
    """
    paths = list(candidates) if candidates is not None else candidate_paths(platform)

    for path in paths:
        if path.is_dir():
            logger.debug(f"Steam root found at {path}")
            return path.absolute()
        logger.debug(f"Steam root candidate missing: {path}")

    tried = ", ".join(str(p) for p in paths) or "(none)"
    raise SteamNotFoundError(
        f"Steam installation not found. Looked in: {tried}. "
        f"Use --steam-root to point at a custom location."
    )


def resolve_root(override: Optional[str] = None, platform: Optional[str] = None) -> Path:
    """
    Honor an explicit root override, otherwise search the defaults.

    Raises:
        SteamNotFoundError: If the override is not a directory or no default exists.
    """
    normalized = normalize_path(override)
    if normalized:
        path = Path(normalized)
        if not path.is_dir():
            raise SteamNotFoundError(f"Steam root override is not a directory: {path}")
        logger.debug(f"Using Steam root override {path}")
        return path

    return locate_root(platform=platform)
