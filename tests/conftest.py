from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Factories that lay out fake Steam installations on disk.
"""

import os
import sys
from pathlib import Path
from typing import Callable, List, Optional

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# Manifest Builders
# -----------------------------------------------------------------------------
def manifest_text(
        app_id: int,
        name: str,
        state_flags: int = 4,
        installdir: Optional[str] = None,
        size_on_disk: Optional[int] = None,
) -> str:
    """Render an appmanifest body the way the Steam client writes it."""
    lines = [
        '"AppState"',
        "{",
        f'\t"appid"\t\t"{app_id}"',
        '\t"Universe"\t\t"1"',
        f'\t"name"\t\t"{name}"',
        f'\t"StateFlags"\t\t"{state_flags}"',
        f'\t"installdir"\t\t"{installdir or name}"',
        '\t"LastUpdated"\t\t"1700000000"',
    ]
    if size_on_disk is not None:
        lines.append(f'\t"SizeOnDisk"\t\t"{size_on_disk}"')
    lines += [
        '\t"InstalledDepots"',
        "\t{",
        f'\t\t"{app_id + 1}"',
        "\t\t{",
        '\t\t\t"manifest"\t\t"123456789"',
        "\t\t}",
        "\t}",
        "}",
    ]
    return "\n".join(lines) + "\n"


def _vdf_path(path: Path) -> str:
    return str(path).replace("\\", "\\\\")


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def steam_root(tmp_path: Path) -> Path:
    """An empty Steam installation: <tmp>/Steam/steamapps."""
    root = tmp_path / "Steam"
    (root / "steamapps").mkdir(parents=True)
    return root


@pytest.fixture
def make_library(tmp_path: Path) -> Callable[[str], Path]:
    """Factory creating an additional library folder with a steamapps dir."""
    def _make(name: str) -> Path:
        lib = tmp_path / name
        (lib / "steamapps").mkdir(parents=True)
        return lib
    return _make


@pytest.fixture
def write_manifest() -> Callable[..., Path]:
    """Factory writing appmanifest_<id>.acf into a library."""
    def _write(
            library: Path,
            app_id: int,
            name: str,
            state_flags: int = 4,
            installdir: Optional[str] = None,
            size_on_disk: Optional[int] = None,
            body: Optional[str] = None,
    ) -> Path:
        path = library / "steamapps" / f"appmanifest_{app_id}.acf"
        path.parent.mkdir(parents=True, exist_ok=True)
        text = body if body is not None else manifest_text(
            app_id, name, state_flags, installdir, size_on_disk
        )
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def write_registry() -> Callable[..., Path]:
    """Factory writing steamapps/libraryfolders.vdf in either known layout."""
    def _write(root: Path, paths: List[Path], legacy: bool = False) -> Path:
        registry = root / "steamapps" / "libraryfolders.vdf"
        registry.parent.mkdir(parents=True, exist_ok=True)

        if legacy:
            lines = ['"LibraryFolders"', "{", '\t"TimeNextStatsReport"\t\t"1700000000"',
                     '\t"ContentStatsID"\t\t"-1234"']
            for i, p in enumerate(paths, start=1):
                lines.append(f'\t"{i}"\t\t"{_vdf_path(p)}"')
            lines.append("}")
        else:
            lines = ['"libraryfolders"', "{"]
            for i, p in enumerate(paths):
                lines += [
                    f'\t"{i}"',
                    "\t{",
                    f'\t\t"path"\t\t"{_vdf_path(p)}"',
                    '\t\t"label"\t\t""',
                    '\t\t"contentid"\t\t"42"',
                    '\t\t"apps"',
                    "\t\t{",
                    "\t\t}",
                    "\t}",
                ]
            lines.append("}")

        registry.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return registry
    return _write
