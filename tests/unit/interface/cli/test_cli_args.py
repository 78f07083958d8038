from __future__ import annotations

"""
Unit tests for CLI Argument Parsing.

Verifies:
1. Subcommand routing and the implicit default command.
2. Mapping of CLI flags to settings overrides.
3. Validation of choices and typed positionals.
"""

import os

import pytest

from steamshelf.infra.fs import normalize_path
from steamshelf.interface.cli.args import args_to_overrides, build_parser, normalize_argv


def parse_args(arg_list):
    """Helper to simulate CLI argument parsing."""
    parser = build_parser()
    return parser.parse_args(normalize_argv(arg_list))


def test_default_command_is_list():
    args = parse_args([])
    assert args.command == "list"

    args = parse_args(["--json"])
    assert args.command == "list"
    assert args.json_output is True


def test_list_filters():
    args = parse_args(["list", "--state", "partial", "--search", "portal", "--sort", "size"])
    assert args.state == "partial"
    assert args.search == "portal"
    assert args.sort_by == "size"


def test_show_and_launch_take_int_app_id():
    assert parse_args(["show", "440"]).app_id == 440

    args = parse_args(["launch", "570", "--print-only"])
    assert args.app_id == 570
    assert args.print_only is True


@pytest.mark.parametrize("argv", [["show", "tf2"], ["list", "--state", "broken"], ["list", "--sort", "x"]])
def test_invalid_arguments_exit(argv):
    with pytest.raises(SystemExit):
        parse_args(argv)


def test_overrides_only_include_explicit_flags():
    overrides = args_to_overrides(parse_args(["list"]))
    assert overrides == {}


def test_overrides_mapping():
    args = parse_args([
        "list",
        "--steam-root", "/opt/steam",
        "--show-errors",
        "--parallel",
        "--sort", "appid",
    ])

    overrides = args_to_overrides(args)

    assert overrides == {
        "steam_root": normalize_path("/opt/steam"),
        "show_errors": True,
        "parallel_scan": True,
        "sort_by": "appid",
    }


def test_common_options_on_every_command():
    args = parse_args(["libraries", "--debug", "--use-defaults"])
    assert args.debug is True
    assert args.use_defaults is True
    assert args_to_overrides(args) == {}


def test_common_options_before_the_command():
    args = parse_args(["--steam-root", "/opt/steam", "--use-defaults", "--json", "libraries"])
    assert args.command == "libraries"
    assert args.use_defaults is True
    assert args.json_output is True
    assert args.steam_root == "/opt/steam"


def test_options_after_the_command_win():
    args = parse_args(["--steam-root", "/a", "show", "440", "--steam-root", "/b"])
    assert args.steam_root == "/b"

    args = parse_args(["--debug", "show", "440"])
    assert args.debug is True


@pytest.mark.parametrize(
    "argv, expected",
    [
        ([], ["list"]),
        (["--json"], ["list", "--json"]),
        (["--json", "libraries"], ["--json", "libraries"]),
        (["--steam-root", "/x", "dump", "f.vdf"], ["--steam-root", "/x", "dump", "f.vdf"]),
        (["--search", "dump"], ["list", "--search", "dump"]),
        (["--help"], ["--help"]),
    ],
)
def test_normalize_argv(argv, expected):
    assert normalize_argv(argv) == expected


def test_relative_steam_root_is_made_absolute(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    overrides = args_to_overrides(parse_args(["list", "--steam-root", "./Steam"]))
    assert overrides["steam_root"] == os.path.join(str(tmp_path), "Steam")
