from __future__ import annotations

"""
Game Catalog Aggregation Service.

Merges the scan results of every library folder into one catalog keyed by
app id. When an app id shows up in more than one place the winner is picked
once all results are in, so the outcome never depends on the order in which
libraries were listed or scanned.
"""

import logging
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from steamshelf.domain.constants import SORT_KEYS
from steamshelf.domain.errors import ManifestError
from steamshelf.domain.models import Game, InstallState, ScanOutcome

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# CATALOG
# -----------------------------------------------------------------------------

class Catalog:
    """Read-only collection of games, at most one per app id."""

    def __init__(self, games: Mapping[int, Game]) -> None:
        self._games: Dict[int, Game] = dict(games)

    def __len__(self) -> int:
        return len(self._games)

    def __contains__(self, app_id: object) -> bool:
        return app_id in self._games

    def __iter__(self) -> Iterator[Game]:
        return iter(self.games())

    def get(self, app_id: int) -> Optional[Game]:
        return self._games.get(app_id)

    def games(self) -> List[Game]:
        """All games by display name (case-insensitive), then app id."""
        return sorted(self._games.values(), key=_name_key)

    def filter_by_state(self, state: InstallState) -> List[Game]:
        return [g for g in self.games() if g.state is state]

    def search(self, text: str) -> List[Game]:
        """Games whose name contains the text, ignoring case."""
        needle = (text or "").casefold()
        return [g for g in self.games() if needle in g.name.casefold()]

    def sorted_games(self, sort_by: str = "name") -> List[Game]:
        """
        All games ordered by one of the supported sort keys.

        Args:
            sort_by: 'name', 'appid' or 'size' (largest first, unknown sizes last).

        Raises:
            ValueError: On an unsupported sort key.
        """
        if sort_by not in SORT_KEYS:
            raise ValueError(f"Unsupported sort key: {sort_by!r}")
        if sort_by == "appid":
            return sorted(self._games.values(), key=lambda g: g.app_id)
        if sort_by == "size":
            return sorted(
                self._games.values(),
                key=lambda g: (g.size_on_disk is None, -(g.size_on_disk or 0), _name_key(g)),
            )
        return self.games()


# -----------------------------------------------------------------------------
# AGGREGATION
# -----------------------------------------------------------------------------

def aggregate(
        libraries: Sequence[Tuple[Path, Sequence[ScanOutcome]]],
) -> Tuple[Catalog, List[ManifestError]]:
    """
    Build the catalog from per-library scan results.

    Duplicate app ids are resolved by preferring a fully installed entry,
    then the library whose path sorts first.

    Args:
        libraries: (library folder, scan outcomes) pairs in any order.

    Returns:
        Tuple[Catalog, List[ManifestError]]: The catalog and every error seen,
                                             in input order.
    """
    candidates: Dict[int, List[Tuple[Path, Game]]] = {}
    errors: List[ManifestError] = []

    for library, outcomes in libraries:
        for outcome in outcomes:
            if isinstance(outcome, ManifestError):
                errors.append(outcome)
            else:
                candidates.setdefault(outcome.app_id, []).append((library, outcome))

    resolved: Dict[int, Game] = {}
    for app_id, entries in candidates.items():
        ranked = sorted(entries, key=_preference_key)
        winner = ranked[0][1]
        resolved[app_id] = winner

        for library, loser in ranked[1:]:
            logger.info(
                f"Duplicate app {app_id} in {library} ({loser.state.value}) ignored; "
                f"keeping {winner.library} ({winner.state.value})"
            )

    logger.debug(f"Catalog built: {len(resolved)} game(s), {len(errors)} error(s)")
    return Catalog(resolved), errors


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _name_key(game: Game) -> Tuple[str, int]:
    return game.name.casefold(), game.app_id


def _preference_key(entry: Tuple[Path, Game]) -> Tuple[bool, str, str]:
    library, game = entry
    return (
        game.state is not InstallState.FULLY_INSTALLED,
        str(library),
        str(game.manifest_path),
    )
