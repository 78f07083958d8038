from __future__ import annotations

"""
Unit tests for the App Manifest Scanner.

Verifies field extraction, install-state derivation, and that broken
manifests are reported individually without hiding valid neighbours.
"""

from pathlib import Path

import pytest

from steamshelf.core.services.scanner import (
    derive_install_state,
    list_manifest_files,
    manifest_dir,
    scan,
    scan_manifest,
)
from steamshelf.domain.constants import PARTIAL_FLAGS_MASK, StateFlags, flag_names
from steamshelf.domain.errors import ManifestError
from steamshelf.domain.models import Game, InstallState


def test_scan_extracts_game_fields(steam_root: Path, write_manifest) -> None:
    path = write_manifest(steam_root, 440, "Team Fortress 2", state_flags=4,
                          installdir="Team Fortress 2", size_on_disk=27046286207)

    [game] = scan(steam_root)

    assert isinstance(game, Game)
    assert game.app_id == 440
    assert game.name == "Team Fortress 2"
    assert game.install_dir == "Team Fortress 2"
    assert game.state is InstallState.FULLY_INSTALLED
    assert game.state_flags == 4
    assert game.size_on_disk == 27046286207
    assert game.last_updated == 1700000000
    assert game.library == steam_root
    assert game.manifest_path == path
    assert game.install_path == steam_root / "steamapps" / "common" / "Team Fortress 2"


def test_scan_accepts_fields_without_appstate_wrapper(steam_root: Path, write_manifest) -> None:
    body = '"appid" "440" "name" "Team Fortress 2" "StateFlags" "4" "installdir" "Team Fortress 2"'
    write_manifest(steam_root, 440, "", body=body)

    [game] = scan(steam_root)

    assert isinstance(game, Game)
    assert (game.app_id, game.name, game.state) == (440, "Team Fortress 2", InstallState.FULLY_INSTALLED)


def test_size_on_disk_is_optional(steam_root: Path, write_manifest) -> None:
    write_manifest(steam_root, 10, "Counter-Strike")
    [game] = scan(steam_root)
    assert game.size_on_disk is None


def test_broken_manifests_do_not_hide_valid_ones(steam_root: Path, write_manifest) -> None:
    write_manifest(steam_root, 10, "Counter-Strike")
    write_manifest(steam_root, 20, "Team Fortress Classic")
    write_manifest(steam_root, 30, "", body='"AppState" { "appid" "30" "name" "Day of Defeat')
    write_manifest(steam_root, 40, "", body='"AppState" { "appid" "40" "StateFlags" "4" }')
    write_manifest(steam_root, 50, "", body='"AppState" { "appid" "fifty" "name" "x" '
                                             '"installdir" "x" "StateFlags" "4" }')
    write_manifest(steam_root, 70, "Half-Life")

    outcomes = scan(steam_root)

    games = [o for o in outcomes if isinstance(o, Game)]
    errors = [o for o in outcomes if isinstance(o, ManifestError)]
    assert len(outcomes) == 6
    assert sorted(g.app_id for g in games) == [10, 20, 70]
    assert len(errors) == 3

    reasons = {e.path.name: e.reason for e in errors}
    assert "malformed" in reasons["appmanifest_30.acf"]
    assert "missing required field 'name'" in reasons["appmanifest_40.acf"]
    assert "not an integer" in reasons["appmanifest_50.acf"]


def test_non_manifest_files_are_ignored(steam_root: Path, write_manifest) -> None:
    write_manifest(steam_root, 10, "Counter-Strike")
    apps = steam_root / "steamapps"
    (apps / "libraryfolders.vdf").write_text('"libraryfolders" {}', encoding="utf-8")
    (apps / "appmanifest_abc.acf").write_text("junk", encoding="utf-8")
    (apps / "appmanifest_99.acf.tmp").write_text("junk", encoding="utf-8")
    (apps / "appmanifest_98.acf").mkdir()

    files = list_manifest_files(apps)

    assert [f.name for f in files] == ["appmanifest_10.acf"]


def test_scan_library_without_steamapps(tmp_path: Path) -> None:
    assert scan(tmp_path) == []


def test_manifest_dir_case_insensitive(tmp_path: Path) -> None:
    legacy = tmp_path / "SteamApps"
    legacy.mkdir()
    found = manifest_dir(tmp_path)
    assert found is not None and found.name.lower() == "steamapps"


def test_scan_manifest_unreadable_file(tmp_path: Path) -> None:
    outcome = scan_manifest(tmp_path / "appmanifest_1.acf", tmp_path)
    assert isinstance(outcome, ManifestError)
    assert "unreadable" in outcome.reason


def test_declared_app_id_wins_over_file_name(steam_root: Path, write_manifest) -> None:
    path = write_manifest(steam_root, 111, "Portal")
    path.rename(path.with_name("appmanifest_222.acf"))

    [game] = scan(steam_root)
    assert game.app_id == 111


# -----------------------------------------------------------------------------
# Install State Derivation
# -----------------------------------------------------------------------------

@pytest.mark.parametrize(
    "flags, expected",
    [
        (4, InstallState.FULLY_INSTALLED),
        (4 | 64, InstallState.FULLY_INSTALLED),
        (6, InstallState.UPDATE_PENDING),
        (4 | 512, InstallState.UPDATE_PENDING),
        (2, InstallState.UPDATE_PENDING),
        (4 | 1024 | 1048576, InstallState.PARTIALLY_INSTALLED),
        (1026, InstallState.UPDATE_PENDING),
        (1 | 1048576, InstallState.PARTIALLY_INSTALLED),
        (4 | 32, InstallState.PARTIALLY_INSTALLED),
        (0, InstallState.UNKNOWN),
        (-1, InstallState.UNKNOWN),
        (4 | 1 << 30, InstallState.UNKNOWN),
    ],
)
def test_derive_install_state(flags: int, expected: InstallState) -> None:
    assert derive_install_state(flags) is expected


def test_flag_names_are_readable() -> None:
    assert flag_names(4) == ["FullyInstalled"]
    assert flag_names(6) == ["UpdateRequired", "FullyInstalled"]
    assert flag_names(4 | 1 << 30) == ["FullyInstalled"]
    assert flag_names(0) == []
    assert StateFlags.Downloading & PARTIAL_FLAGS_MASK
