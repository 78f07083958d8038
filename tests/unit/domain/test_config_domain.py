from __future__ import annotations

"""
Unit tests for the Settings Domain.

Verifies:
1. Default settings generation.
2. Resilience against corrupted or invalid settings files.
3. Legacy key migration.
4. Persistence (Save/Load) without touching real user data.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from steamshelf.domain.config import (
    get_default_settings,
    get_settings_path,
    load_settings,
    save_settings,
    validate_settings,
)
from steamshelf.domain.constants import CURRENT_SETTINGS_VERSION


@pytest.fixture
def settings_file(tmp_path: Path):
    """
    Redirect the user data directory to a temporary folder.
    Prevents tests from reading/writing the real OS user folder.
    """
    data_dir = tmp_path / "SteamShelf"
    data_dir.mkdir()
    with patch("steamshelf.domain.config.get_user_data_dir", return_value=str(data_dir)):
        yield data_dir / "settings.json"


def test_settings_path_uses_user_data_dir(settings_file: Path) -> None:
    assert get_settings_path() == str(settings_file)


def test_load_fresh_state_returns_defaults(settings_file: Path) -> None:
    assert not settings_file.exists()
    assert load_settings() == get_default_settings()


def test_load_corrupted_file_returns_defaults(settings_file: Path) -> None:
    settings_file.write_text("{ incomplete json ", encoding="utf-8")
    assert load_settings() == get_default_settings()


def test_save_and_load_round_trip(settings_file: Path) -> None:
    settings = get_default_settings()
    settings.update({"sort_by": "size", "steam_root": "/opt/steam", "show_errors": True})

    assert save_settings(settings) is True
    on_disk = json.loads(settings_file.read_text(encoding="utf-8"))
    assert on_disk["version"] == CURRENT_SETTINGS_VERSION

    loaded = load_settings()
    assert loaded["sort_by"] == "size"
    assert loaded["steam_root"] == "/opt/steam"
    assert loaded["show_errors"] is True
    assert loaded["parallel_scan"] is False


def test_legacy_keys_are_migrated(settings_file: Path) -> None:
    settings_file.write_text(json.dumps({"sort": "appid", "root": "/legacy"}), encoding="utf-8")

    loaded = load_settings()

    assert loaded["sort_by"] == "appid"
    assert loaded["steam_root"] == "/legacy"
    assert "sort" not in loaded


def test_validate_replaces_invalid_values_individually() -> None:
    clean, warnings = validate_settings({
        "sort_by": "rating",
        "steam_root": 42,
        "show_errors": "yes",
        "parallel_scan": True,
        "unknown_key": 1,
    })

    defaults = get_default_settings()
    assert clean["sort_by"] == defaults["sort_by"]
    assert clean["steam_root"] == defaults["steam_root"]
    assert clean["show_errors"] is defaults["show_errors"]
    assert clean["parallel_scan"] is True
    assert "unknown_key" not in clean
    assert len(warnings) == 3


def test_validate_non_dict_input() -> None:
    clean, warnings = validate_settings(["not", "a", "dict"])
    assert clean == get_default_settings()
    assert len(warnings) == 1


def test_validate_normalizes_values() -> None:
    clean, warnings = validate_settings({"sort_by": " Size ", "steam_root": None})
    assert clean["sort_by"] == "size"
    assert clean["steam_root"] == ""
    assert warnings == []
