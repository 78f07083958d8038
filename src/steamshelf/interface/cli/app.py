from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, settings resolution
(defaults, persisted file, command-line overrides), discovery, and
rendering of catalog queries. Environment failures map to exit codes; a
broken manifest never stops the listing.
"""

import json
import sys
from typing import Any, Dict, List, Optional

from steamshelf.core.engine import run_discovery
from steamshelf.core.keyvalues.parser import load
from steamshelf.core.keyvalues.writer import dumps
from steamshelf.core.services.launchers import find_launchers
from steamshelf.domain.config import (
    get_default_settings,
    load_settings,
    save_settings,
    validate_settings,
)
from steamshelf.domain.constants import flag_names
from steamshelf.domain.errors import KeyValuesParseError, SteamNotFoundError
from steamshelf.domain.models import DiscoveryResult, Game, InstallState
from steamshelf.infra.launcher import open_uri
from steamshelf.infra.logging import (
    LoggingConfig,
    configure_logging,
    get_default_log_path,
    get_logger,
)
from steamshelf.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_ENVIRONMENT = 2
EXIT_NOT_LAUNCHABLE = 3
EXIT_UNKNOWN_APP = 4
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code.
    """
    if sys.platform == "win32" and hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(cli_args.normalize_argv(sys.argv[1:] if argv is None else argv))

    # 2. Logging bootstrap (stderr, quiet unless --debug; file only on request)
    logging_conf = LoggingConfig(
        level="DEBUG" if args.debug else "WARNING",
        console=True,
        log_file=get_default_log_path() if args.log_file else None,
    )
    configure_logging(logging_conf)
    logger.debug(f"CLI command '{args.command}' initiated.")

    # 3. Settings resolution (defaults -> persisted file -> command line)
    base = get_default_settings() if args.use_defaults else load_settings()
    base.update(cli_args.args_to_overrides(args))
    settings, warnings = validate_settings(base)
    for w in warnings:
        logger.warning(f"Settings: {w}")

    if args.save_settings and not save_settings(settings):
        print("WARNING: settings could not be saved.", file=sys.stderr)

    if args.command == "dump":
        return _cmd_dump(args.file, as_json=args.json_output)

    # 4. Discovery phase
    try:
        result = run_discovery(
            settings["steam_root"] or None,
            parallel=settings["parallel_scan"],
        )
    except SteamNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_ENVIRONMENT
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED

    # 5. Command dispatch
    if args.command == "libraries":
        code = _cmd_libraries(result, as_json=args.json_output)
    elif args.command == "show":
        code = _cmd_show(result, args.app_id, as_json=args.json_output)
    elif args.command == "launch":
        code = _cmd_launch(result, args.app_id, print_only=args.print_only)
    else:
        games = _select_games(result, args.state, args.search, settings["sort_by"])
        code = _cmd_list(result, games, as_json=args.json_output)

    if settings["show_errors"]:
        _print_problems(result)

    return code

# -----------------------------------------------------------------------------
# COMMANDS
# -----------------------------------------------------------------------------

def _select_games(
        result: DiscoveryResult,
        state: Optional[str],
        search: Optional[str],
        sort_by: str,
) -> List[Game]:
    """Apply the list filters on top of the requested sort order."""
    games = result.catalog.sorted_games(sort_by)
    if state:
        wanted = InstallState.from_label(state)
        games = [g for g in games if g.state is wanted]
    if search:
        matching = {g.app_id for g in result.catalog.search(search)}
        games = [g for g in games if g.app_id in matching]
    return games


def _cmd_list(result: DiscoveryResult, games: List[Game], *, as_json: bool) -> int:
    if as_json:
        print(json.dumps(_result_payload(result, games), ensure_ascii=False, indent=2))
        return EXIT_OK

    if not games:
        print("No games found.")
        return EXIT_OK

    for game in games:
        print(_format_row(game))
    print(f"\n{len(games)} game(s)")
    return EXIT_OK


def _cmd_show(result: DiscoveryResult, app_id: int, *, as_json: bool) -> int:
    game = result.catalog.get(app_id)
    if game is None:
        print(f"ERROR: app {app_id} is not installed in any library.", file=sys.stderr)
        return EXIT_UNKNOWN_APP

    launch_info = find_launchers(game.install_path)
    data = game.to_dict()
    data.update(launch_info.to_dict())

    if as_json:
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return EXIT_OK

    labels = {
        "app_id": "App ID",
        "name": "Name",
        "state": "State",
        "state_flags": "Flags",
        "size_on_disk": "Size",
        "install_path": "Installed at",
        "library": "Library",
        "manifest_path": "Manifest",
        "launch_uri": "Launch URI",
        "platform": "Platform",
    }
    data["state_flags"] = f"{game.state_flags} ({', '.join(flag_names(game.state_flags)) or 'none'})"
    data["size_on_disk"] = _format_size(game.size_on_disk)
    data["platform"] = data["platform"] or "-"
    for key, label in labels.items():
        print(f"{label + ':':<14}{data[key]}")

    if launch_info.launchers:
        print("Launchers:")
        for path in launch_info.launchers:
            print(f"  - {path.name}")
    return EXIT_OK


def _cmd_launch(result: DiscoveryResult, app_id: int, *, print_only: bool) -> int:
    game = result.catalog.get(app_id)
    if game is None:
        print(f"ERROR: app {app_id} is not installed in any library.", file=sys.stderr)
        return EXIT_UNKNOWN_APP

    if not game.is_launchable:
        print(
            f"ERROR: {game.name} cannot be launched (state: {game.state.value}).",
            file=sys.stderr,
        )
        return EXIT_NOT_LAUNCHABLE

    if print_only:
        print(game.launch_uri)
        return EXIT_OK

    print(f"Launching {game.name}...")
    return EXIT_OK if open_uri(game.launch_uri) else EXIT_FAILURE


def _cmd_libraries(result: DiscoveryResult, *, as_json: bool) -> int:
    if as_json:
        payload = {
            "steam_root": str(result.steam_root),
            "libraries": [str(p) for p in result.libraries],
            "errors": [{"path": str(e.path), "reason": e.reason} for e in result.errors],
            "registry_error": result.registry_error,
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return EXIT_OK

    print(f"Steam root: {result.steam_root}")
    for path in result.libraries:
        print(f"  - {path}")
    return EXIT_OK


def _cmd_dump(file_path: str, *, as_json: bool) -> int:
    try:
        tree = load(file_path)
    except OSError as e:
        print(f"ERROR: cannot read {file_path}: {e}", file=sys.stderr)
        return EXIT_ENVIRONMENT
    except KeyValuesParseError as e:
        print(f"ERROR: {file_path}: {e}", file=sys.stderr)
        return EXIT_FAILURE

    if as_json:
        print(json.dumps(tree, ensure_ascii=False, indent=2))
    else:
        sys.stdout.write(dumps(tree))
    return EXIT_OK

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _result_payload(result: DiscoveryResult, games: List[Game]) -> Dict[str, Any]:
    return {
        "steam_root": str(result.steam_root),
        "libraries": [str(p) for p in result.libraries],
        "games": [g.to_dict() for g in games],
        "errors": [{"path": str(e.path), "reason": e.reason} for e in result.errors],
        "registry_error": result.registry_error,
    }


def _format_row(game: Game) -> str:
    return f"{game.app_id:>8}  {game.state.value:<14}  {_format_size(game.size_on_disk):>9}  {game.name}"


def _format_size(size: Optional[int]) -> str:
    if size is None:
        return "-"
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024:
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} TB"


def _print_problems(result: DiscoveryResult) -> None:
    """Report skipped manifests and registry trouble on stderr."""
    if result.registry_error:
        print(f"WARNING: library registry ignored: {result.registry_error}", file=sys.stderr)
    if not result.errors:
        return
    print(f"\n{len(result.errors)} manifest(s) skipped:", file=sys.stderr)
    for err in result.errors:
        print(f"  - {err}", file=sys.stderr)

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
