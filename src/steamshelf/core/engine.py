from __future__ import annotations

"""
Core discovery pipeline.

This module coordinates one full discovery pass:
1. Resolves the Steam root (explicit override or well-known locations).
2. Reads the library registry, falling back to the default library.
3. Scans every library folder, optionally in parallel threads.
4. Aggregates the results into a de-duplicated catalog.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from steamshelf.core.discovery.locator import resolve_root
from steamshelf.core.discovery.registry import read_libraries_or_default
from steamshelf.core.services.catalog import aggregate
from steamshelf.core.services.scanner import scan
from steamshelf.domain.models import DiscoveryResult, ScanOutcome

logger = logging.getLogger(__name__)


def run_discovery(
        steam_root: Optional[str] = None,
        *,
        parallel: bool = False,
        max_workers: int = 4,
) -> DiscoveryResult:
    """
    Execute the full discovery pipeline.

    Args:
        steam_root: Optional explicit Steam root; auto-detected when empty.
        parallel: If True, scan library folders concurrently.
        max_workers: Thread pool size for parallel scans.

    Returns:
        DiscoveryResult: Catalog plus every non-fatal problem encountered.

    Raises:
        SteamNotFoundError: If no Steam installation can be located.
    """
    logger.info("Discovery started.")

    # -------------------------------------------------------------------------
    # 1) Root & Library Resolution
    # -------------------------------------------------------------------------
    root = resolve_root(steam_root)
    libraries, registry_error = read_libraries_or_default(root)

    # -------------------------------------------------------------------------
    # 2) Library Scans
    # -------------------------------------------------------------------------
    scanned = scan_libraries(libraries, parallel=parallel, max_workers=max_workers)

    # -------------------------------------------------------------------------
    # 3) Aggregation
    # -------------------------------------------------------------------------
    catalog, errors = aggregate(scanned)

    logger.info(
        f"Discovery completed: {len(catalog)} game(s) in {len(libraries)} "
        f"librar{'y' if len(libraries) == 1 else 'ies'}, {len(errors)} skipped manifest(s)."
    )
    return DiscoveryResult(
        steam_root=root,
        libraries=libraries,
        catalog=catalog,
        errors=errors,
        registry_error=registry_error,
    )


def scan_libraries(
        libraries: Sequence[Path],
        *,
        parallel: bool = False,
        max_workers: int = 4,
) -> List[Tuple[Path, List[ScanOutcome]]]:
    """
    Scan each library and pair it with its outcomes, in input order.

    Parallel runs gather every future before returning, so callers see the
    same sequence either way.
    """
    if not parallel or len(libraries) < 2:
        return [(lib, scan(lib)) for lib in libraries]

    workers = max(1, min(max_workers, len(libraries)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="LibraryScanner") as executor:
        futures = [executor.submit(scan, lib) for lib in libraries]
        return [(lib, future.result()) for lib, future in zip(libraries, futures)]
