from __future__ import annotations

"""
App Manifest Discovery and Extraction Service.

Lists the appmanifest_<appid>.acf files of a library folder and turns each
one into a Game record. Every file is handled in isolation: a manifest that
cannot be read, parsed or interpreted yields a ManifestError entry in the
result list while its neighbours are still processed.
"""

import logging
from pathlib import Path
from typing import List, Optional

from steamshelf.core.keyvalues.parser import find_key, load
from steamshelf.domain import constants as const
from steamshelf.domain.errors import KeyValuesParseError, ManifestError
from steamshelf.domain.models import (
    AttributeNode,
    AttributeTree,
    Game,
    InstallState,
    ScanOutcome,
)

logger = logging.getLogger(__name__)


# ==============================================================================
# PUBLIC API (SCANNING SERVICES)
# ==============================================================================

def scan(library: Path) -> List[ScanOutcome]:
    """
    Scan one library folder for installed apps.

    Args:
        library: Library folder (the directory holding 'steamapps').

    Returns:
        List[ScanOutcome]: One Game or ManifestError per manifest file,
                           ordered by file name.
    """
    apps_dir = manifest_dir(library)
    if apps_dir is None:
        logger.debug(f"Library {library} has no steamapps directory")
        return []

    try:
        files = list_manifest_files(apps_dir)
    except OSError as e:
        logger.error(f"Cannot list manifests in {apps_dir}: {e}")
        return [ManifestError(path=apps_dir, reason=f"cannot list directory: {e}")]

    outcomes: List[ScanOutcome] = [scan_manifest(path, library) for path in files]

    failed = sum(1 for o in outcomes if isinstance(o, ManifestError))
    logger.debug(f"Scanned {library}: {len(outcomes) - failed} game(s), {failed} error(s)")
    return outcomes


def scan_manifest(path: Path, library: Path) -> ScanOutcome:
    """
    Read, parse and interpret a single app manifest.

    Args:
        path: Manifest file path.
        library: Library folder owning the manifest.

    Returns:
        ScanOutcome: The Game, or a ManifestError describing the failure.
    """
    try:
        tree = load(path)
    except OSError as e:
        logger.info(f"Unreadable manifest {path}: {e}")
        return ManifestError(path=path, reason=f"unreadable: {e}")
    except KeyValuesParseError as e:
        logger.info(f"Malformed manifest {path}: {e}")
        return ManifestError(path=path, reason=f"malformed: {e}")

    try:
        game = game_from_tree(tree, path, library)
    except ValueError as e:
        logger.info(f"Invalid manifest {path}: {e}")
        return ManifestError(path=path, reason=str(e))

    match = const.MANIFEST_NAME_RX.match(path.name)
    if match and int(match.group(1)) != game.app_id:
        logger.warning(
            f"Manifest {path.name} declares app id {game.app_id}; using the declared id"
        )
    return game


def game_from_tree(tree: AttributeTree, path: Path, library: Path) -> Game:
    """
    Build a Game from a parsed manifest document.

    Accepts both the usual '"AppState" { ... }' wrapper and a bare list of
    fields at the top level.

    Raises:
        ValueError: If a required field is missing or not well-formed.
    """
    state_block = find_key(tree, "AppState")
    fields: AttributeNode = state_block if isinstance(state_block, dict) else tree

    app_id = _required_int(fields, "appid")
    name = _required_str(fields, "name")
    install_dir = _required_str(fields, "installdir")
    flags = _required_int(fields, "StateFlags")
    logger.debug(f"{path.name}: StateFlags {flags} ({', '.join(const.flag_names(flags)) or 'none'})")

    return Game(
        app_id=app_id,
        name=name,
        install_dir=install_dir,
        state=derive_install_state(flags),
        state_flags=flags,
        library=library,
        manifest_path=path,
        size_on_disk=_optional_int(fields, "SizeOnDisk"),
        last_updated=_optional_int(fields, "LastUpdated"),
    )


def derive_install_state(flags: int) -> InstallState:
    """
    Map a StateFlags bitmask to an InstallState.

    Rules, in order:
        - FullyInstalled alone (optionally with AppRunning) -> FULLY_INSTALLED
        - zero, negative or any bit outside the known set   -> UNKNOWN
        - any bit meaning files are incomplete              -> PARTIALLY_INSTALLED
        - any other combination of known bits               -> UPDATE_PENDING
    """
    if (flags & ~int(const.StateFlags.AppRunning)) == const.StateFlags.FullyInstalled:
        return InstallState.FULLY_INSTALLED
    if flags <= 0 or flags & ~const.KNOWN_FLAGS_MASK:
        return InstallState.UNKNOWN
    if flags & const.PARTIAL_FLAGS_MASK:
        return InstallState.PARTIALLY_INSTALLED
    return InstallState.UPDATE_PENDING


def manifest_dir(library: Path) -> Optional[Path]:
    """
    Locate the 'steamapps' directory of a library.

    Old installations may spell it 'SteamApps'; the exact name is preferred.
    """
    exact = library / const.STEAMAPPS_DIR
    if exact.is_dir():
        return exact
    try:
        for child in library.iterdir():
            if child.name.lower() == const.STEAMAPPS_DIR and child.is_dir():
                return child
    except OSError:
        return None
    return None


def list_manifest_files(apps_dir: Path) -> List[Path]:
    """Return appmanifest files in a steamapps directory, sorted by name."""
    return sorted(
        (p for p in apps_dir.iterdir() if const.MANIFEST_NAME_RX.match(p.name) and p.is_file()),
        key=lambda p: p.name.lower(),
    )


# ==============================================================================
# FIELD EXTRACTION HELPERS
# ==============================================================================

def _required_str(fields: AttributeNode, key: str) -> str:
    value = find_key(fields, key)
    if value is None:
        raise ValueError(f"missing required field '{key}'")
    if not isinstance(value, str):
        raise ValueError(f"field '{key}' must be a value, not a block")
    return value


def _required_int(fields: AttributeNode, key: str) -> int:
    raw = _required_str(fields, key)
    try:
        return int(raw.strip())
    except ValueError:
        raise ValueError(f"field '{key}' is not an integer: {raw!r}") from None


def _optional_int(fields: AttributeNode, key: str) -> Optional[int]:
    value = find_key(fields, key)
    if not isinstance(value, str):
        return None
    try:
        return int(value.strip())
    except ValueError:
        logger.debug(f"Ignoring non-numeric '{key}' value {value!r}")
        return None
