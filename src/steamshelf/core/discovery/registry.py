from __future__ import annotations

"""
Library Folder Registry Reader.

Reads libraryfolders.vdf under the Steam root and produces the list of
library folders to scan. Two registry layouts exist in the wild:

    legacy flat      "LibraryFolders" { "1" "D:\\SteamLibrary" }
    indexed blocks   "libraryfolders" { "0" { "path" "D:\\SteamLibrary" ... } }

Each numeric entry is decoded by trying the known layouts in a fixed order.
"""

import logging
import os
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from steamshelf.core.keyvalues.parser import find_key, load
from steamshelf.domain.constants import LIBRARY_REGISTRY_PATHS
from steamshelf.domain.errors import KeyValuesParseError, RegistryError
from steamshelf.domain.models import AttributeNode, AttributeTree

logger = logging.getLogger(__name__)

_ROOT_BLOCK = "libraryfolders"


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def registry_path(root: Path) -> Optional[Path]:
    """Return the first registry file present under the Steam root, if any."""
    for parts in LIBRARY_REGISTRY_PATHS:
        candidate = root.joinpath(*parts)
        if candidate.is_file():
            return candidate
    return None


def read_libraries(root: Path) -> List[Path]:
    """
    Resolve every library folder known to the Steam installation.

    The root's own default library always comes first. Registry entries
    follow in index order; entries pointing at missing directories are
    dropped without error.

    Args:
        root: Steam installation root.

    Returns:
        List[Path]: Absolute, de-duplicated library folders.

    Raises:
        RegistryError: If the registry exists but cannot be read or decoded.
    """
    root = root.absolute()
    path = registry_path(root)
    if path is None:
        logger.debug(f"No library registry under {root}; using the default library only.")
        return [root]

    try:
        tree = load(path)
    except KeyValuesParseError as e:
        raise RegistryError(path, f"malformed registry: {e}") from e
    except OSError as e:
        raise RegistryError(path, f"unreadable registry: {e}") from e

    extra = decode_registry(tree, path)
    libraries = _normalize(root, [root] + extra)
    logger.info(f"Found {len(libraries)} Steam library folder(s)")
    return libraries


def read_libraries_or_default(root: Path) -> Tuple[List[Path], Optional[str]]:
    """
    Like read_libraries, but fall back to the default library on RegistryError.

    Returns:
        Tuple[List[Path], Optional[str]]: (Library folders, Registry error message).
    """
    try:
        return read_libraries(root), None
    except RegistryError as e:
        logger.warning(f"Library registry ignored: {e}")
        return [root.absolute()], str(e)


def decode_registry(tree: AttributeTree, path: Path) -> List[str]:
    """
    Extract raw library paths from a parsed registry document.

    Raises:
        RegistryError: If the document matches neither known layout.
    """
    block = find_key(tree, _ROOT_BLOCK)
    if not isinstance(block, dict):
        raise RegistryError(path, f"missing '{_ROOT_BLOCK}' block")

    indexed = sorted(
        ((int(key), value) for key, value in block.items() if key.isdecimal()),
        key=lambda item: item[0],
    )

    raw_paths: List[str] = []
    for index, entry in indexed:
        decoded = _decode_entry(entry)
        if decoded is None:
            raise RegistryError(path, f"library entry {index} has an unrecognized layout")
        raw_paths.append(decoded)
    return raw_paths


# -----------------------------------------------------------------------------
# ENTRY DECODERS
# -----------------------------------------------------------------------------

def _decode_flat(entry: AttributeNode) -> Optional[str]:
    if isinstance(entry, str) and entry.strip():
        return entry
    return None


def _decode_indexed(entry: AttributeNode) -> Optional[str]:
    path = find_key(entry, "path")
    if isinstance(path, str) and path.strip():
        return path
    return None


_DECODERS: Sequence[Callable[[AttributeNode], Optional[str]]] = (
    _decode_flat,
    _decode_indexed,
)


def _decode_entry(entry: AttributeNode) -> Optional[str]:
    for decoder in _DECODERS:
        decoded = decoder(entry)
        if decoded is not None:
            return decoded
    return None


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _normalize(root: Path, raw_paths: Sequence[Union[Path, str]]) -> List[Path]:
    """Make paths absolute, drop missing directories and duplicates."""
    seen = set()
    result: List[Path] = []

    for raw in raw_paths:
        path = Path(os.path.expanduser(str(raw)))
        if not path.is_absolute():
            path = root / path

        if not path.is_dir():
            logger.debug(f"Skipping stale library folder {path}")
            continue

        key = os.path.normcase(str(path.resolve()))
        if key in seen:
            continue
        seen.add(key)
        result.append(path)

    return result
