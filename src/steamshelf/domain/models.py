from __future__ import annotations

"""
Library Domain Data Models.

Defines the attribute tree produced by the key-value parser, the Game record
extracted from app manifests, and the result object handed from the
discovery engine to the interface layer.
"""

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Union

from steamshelf.domain import constants as const
from steamshelf.domain.errors import ManifestError

if TYPE_CHECKING:
    from steamshelf.core.services.catalog import Catalog

# -----------------------------------------------------------------------------
# ATTRIBUTE TREE
# -----------------------------------------------------------------------------

# A leaf is a plain string; a container is an insertion-ordered dict.
AttributeNode = Union[str, Dict[str, "AttributeNode"]]
AttributeTree = Dict[str, AttributeNode]


# -----------------------------------------------------------------------------
# GAME RECORD
# -----------------------------------------------------------------------------

class InstallState(enum.Enum):
    """Installation status derived from a manifest's StateFlags field."""
    FULLY_INSTALLED = "installed"
    UPDATE_PENDING = "update-pending"
    PARTIALLY_INSTALLED = "partial"
    UNKNOWN = "unknown"

    @classmethod
    def from_label(cls, label: str) -> "InstallState":
        """
        Resolve a CLI/settings label into a state.

        Raises:
            ValueError: If the label names no state.
        """
        wanted = (label or "").strip().lower()
        for state in cls:
            if state.value == wanted or state.name.lower() == wanted:
                return state
        raise ValueError(f"Unknown install state: {label!r}")


class Platform(enum.Enum):
    """Runtime a game's launchers target."""
    NATIVE = "native"
    WINE = "wine"


@dataclass(frozen=True)
class LaunchInfo:
    """
    Launchers found in a game's install directory.

    Attributes:
        platform: Shared platform of every launcher; None when unknown or mixed.
        launchers: Executable files in the directory root, sorted by name.
    """
    platform: Optional[Platform]
    launchers: List[Path] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "platform": self.platform.value if self.platform else None,
            "launchers": [str(p) for p in self.launchers],
        }


@dataclass(frozen=True)
class Game:
    """
    A single Steam app as described by its appmanifest file.

    Attributes:
        app_id: Steam app id, unique across the catalog.
        name: Display name.
        install_dir: Folder name relative to the library's 'steamapps/common'.
        state: Derived install state.
        state_flags: Raw StateFlags value as written by the client.
        library: Library folder the manifest was found in (path value only).
        manifest_path: Absolute path to the source manifest.
        size_on_disk: Installed size in bytes when the manifest reports it.
        last_updated: Unix timestamp of the last update when reported.
    """
    app_id: int
    name: str
    install_dir: str
    state: InstallState
    state_flags: int
    library: Path
    manifest_path: Path
    size_on_disk: Optional[int] = None
    last_updated: Optional[int] = None

    @property
    def install_path(self) -> Path:
        return self.library / const.STEAMAPPS_DIR / const.COMMON_DIR / self.install_dir

    @property
    def launch_uri(self) -> str:
        return const.LAUNCH_URI_TEMPLATE.format(app_id=self.app_id)

    @property
    def is_launchable(self) -> bool:
        """Only fully installed games may be offered for launch."""
        return self.state is InstallState.FULLY_INSTALLED

    def to_dict(self) -> Dict[str, object]:
        """Serialize to JSON-compatible primitives for the CLI."""
        return {
            "app_id": self.app_id,
            "name": self.name,
            "install_dir": self.install_dir,
            "install_path": str(self.install_path),
            "state": self.state.value,
            "state_flags": self.state_flags,
            "size_on_disk": self.size_on_disk,
            "last_updated": self.last_updated,
            "library": str(self.library),
            "manifest_path": str(self.manifest_path),
            "launch_uri": self.launch_uri,
        }


# Outcome of scanning one manifest file.
ScanOutcome = Union[Game, ManifestError]


# -----------------------------------------------------------------------------
# DISCOVERY RESULT
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class DiscoveryResult:
    """
    Unified result of one discovery pass.

    Attributes:
        steam_root: Resolved Steam installation directory.
        libraries: Library folders that were scanned, default library first.
        catalog: De-duplicated game catalog.
        errors: Manifests that were skipped, in scan order.
        registry_error: Message describing an unreadable registry, if any.
    """
    steam_root: Path
    libraries: List[Path]
    catalog: "Catalog"
    errors: List[ManifestError] = field(default_factory=list)
    registry_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.errors and self.registry_error is None
