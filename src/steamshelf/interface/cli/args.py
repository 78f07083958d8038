from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema (subcommands and their shared options) and
translates parsed namespaces into settings overrides.
"""

import argparse
from typing import Any, Dict, List, Optional

from steamshelf.domain.constants import SORT_KEYS
from steamshelf.domain.models import InstallState
from steamshelf.infra.fs import normalize_path

COMMANDS = ("list", "show", "launch", "libraries", "dump")
DEFAULT_COMMAND = "list"

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the SteamShelf CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    common = _build_common_options(suppress=True)

    p = argparse.ArgumentParser(
        prog="steamshelf",
        description="List, filter and launch the games of your local Steam libraries.",
        parents=[_build_common_options()],
    )
    sub = p.add_subparsers(dest="command", metavar="COMMAND")

    # --- Catalog Queries ---
    p_list = sub.add_parser("list", parents=[common], help="List installed games.")
    p_list.add_argument(
        "--state",
        choices=[s.value for s in InstallState],
        default=None,
        help="Only show games in this install state.",
    )
    p_list.add_argument(
        "--search",
        default=None,
        help="Only show games whose name contains this text.",
    )
    p_list.add_argument(
        "--sort",
        dest="sort_by",
        choices=SORT_KEYS,
        default=None,
        help="Sort order (overrides the saved preference).",
    )

    p_show = sub.add_parser("show", parents=[common], help="Show one game in detail.")
    p_show.add_argument("app_id", type=int, help="Steam app id.")

    # --- Launch Hand-off ---
    p_launch = sub.add_parser("launch", parents=[common], help="Launch a fully installed game.")
    p_launch.add_argument("app_id", type=int, help="Steam app id.")
    p_launch.add_argument(
        "--print-only",
        action="store_true",
        help="Print the launch URI instead of opening it.",
    )

    # --- Diagnostics ---
    sub.add_parser("libraries", parents=[common], help="List the library folders in use.")

    p_dump = sub.add_parser("dump", parents=[common], help="Parse a key-value file and print it back.")
    p_dump.add_argument("file", help="Path to a .vdf or .acf file.")

    return p


def _build_common_options(suppress: bool = False) -> argparse.ArgumentParser:
    """
    Options accepted before and after the command.

    Subcommand copies default to SUPPRESS so they only overwrite values
    that were given after the command.
    """
    def default(value: Any) -> Any:
        return argparse.SUPPRESS if suppress else value

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--steam-root",
        dest="steam_root",
        default=default(None),
        help="Steam installation directory (skips auto-detection).",
    )
    common.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        default=default(False),
        help="Emit machine-readable JSON.",
    )
    common.add_argument(
        "--show-errors",
        action="store_true",
        default=default(False),
        help="Report manifests that could not be read.",
    )
    common.add_argument(
        "--parallel",
        action="store_true",
        default=default(False),
        help="Scan library folders concurrently.",
    )
    common.add_argument(
        "--use-defaults",
        action="store_true",
        default=default(False),
        help="Ignore the saved settings file.",
    )
    common.add_argument(
        "--save-settings",
        action="store_true",
        default=default(False),
        help="Persist the effective settings (including overrides) for later runs.",
    )
    common.add_argument(
        "--debug",
        action="store_true",
        default=default(False),
        help="Elevate logging verbosity to DEBUG.",
    )
    common.add_argument(
        "--log-file",
        action="store_true",
        default=default(False),
        help="Also write logs to the rotating file in the user data directory.",
    )
    return common


# Options whose next token is a value, never a command name
_VALUE_OPTIONS = ("--steam-root", "--state", "--search", "--sort")


def normalize_argv(argv: Optional[List[str]]) -> List[str]:
    """Insert the default command when no command was given."""
    args = list(argv or [])
    skip_next = False
    for token in args:
        if skip_next:
            skip_next = False
            continue
        if token in ("-h", "--help") or token in COMMANDS:
            return args
        if token in _VALUE_OPTIONS:
            skip_next = True
            continue
        if not token.startswith("-"):
            break
    return [DEFAULT_COMMAND] + args

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into settings overrides.

    Only values the user actually set are returned, so saved settings
    survive for everything else. The Steam root is made absolute so a
    saved relative path keeps pointing at the same place.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Settings overrides subset.
    """
    overrides: Dict[str, Any] = {}

    steam_root = normalize_path(args.steam_root)
    if steam_root:
        overrides["steam_root"] = steam_root
    if args.show_errors:
        overrides["show_errors"] = True
    if args.parallel:
        overrides["parallel_scan"] = True
    if getattr(args, "sort_by", None):
        overrides["sort_by"] = args.sort_by

    return overrides
