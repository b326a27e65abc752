"""
CLI (Command Line Interface).

    climods                      start the interactive REPL (same as `climods interactive`)
    climods run <command...>     execute one command, e.g. `climods run add CS2103`
    climods refresh              re-download the module listing into the local cache

Global options (before the sub-command):

    --data-dir DIR   where user_modules.json / preferences.json are kept
    --year YYYY-YYYY academic year of the catalogue
    --api-url URL    NUSMods API base URL
    -v / -vv         log INFO / DEBUG messages to stderr
"""

from __future__ import annotations

import argparse
import logging

from climods.api import NusModsClient
from climods.app import build_model, refresh_catalogue_cache
from climods.config import Config, load_config
from climods.errors import CommandError, ParseError, RetrievalError
from climods.session import Model
from climods.storage import Storage

logger = logging.getLogger(__name__)


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _save_prefs(model: Model, storage: Storage) -> None:
    try:
        storage.save_user_prefs(model.get_user_prefs())
    except OSError as e:
        logger.warning("Could not save preferences: %s", e)


def _cmd_run(args: argparse.Namespace, config: Config, client: NusModsClient, storage: Storage) -> int:
    """
    Execute a single command line and print its feedback.
    """
    from climods.interactive import execute_line, render_result

    line = " ".join(args.words).strip()
    if not line:
        print("Please provide a command, e.g. 'help'.")
        return 1

    try:
        model = build_model(config, client, storage)
    except RetrievalError as e:
        print(f"Could not load the module catalogue: {e}")
        return 1

    try:
        result = execute_line(line, model, storage)
    except ParseError as e:
        print(e.message)
        if e.usage:
            print(e.usage)
        return 1
    except CommandError as e:
        print(str(e))
        return 1

    render_result(result, model)
    _save_prefs(model, storage)
    return 0


def _cmd_refresh(args: argparse.Namespace, config: Config, client: NusModsClient, storage: Storage) -> int:
    try:
        rows = refresh_catalogue_cache(client, storage, config.academic_year)
    except RetrievalError as e:
        print(f"Refresh failed: {e}")
        return 1
    print(f"Cached {len(rows)} modules for {config.academic_year} in {storage.catalogue_cache_path(config.academic_year)}")
    return 0


def _cmd_interactive(args: argparse.Namespace, config: Config, client: NusModsClient, storage: Storage) -> int:
    from climods.interactive import run_interactive

    try:
        model = build_model(config, client, storage)
    except RetrievalError as e:
        print(f"Could not load the module catalogue: {e}")
        return 1

    run_interactive(model, storage)
    _save_prefs(model, storage)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="climods", description="CLIMods - NUS module planner")
    parser.add_argument("--data-dir", type=str, default=None, help="Directory for your saved data")
    parser.add_argument("--year", type=str, default=None, help="Academic year (e.g. 2026-2027)")
    parser.add_argument("--api-url", type=str, default=None, help="NUSMods API base URL")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More log output (-vv for debug)")

    sub = parser.add_subparsers(dest="command")

    p_run = sub.add_parser("run", help="Execute one command (e.g. 'run add CS2103')")
    p_run.add_argument("words", nargs=argparse.REMAINDER, help="Command and its arguments")

    sub.add_parser("refresh", help="Re-download the module listing")
    sub.add_parser("interactive", help="Interactive mode (default)")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    config = load_config(data_dir=args.data_dir, academic_year=args.year, api_base_url=args.api_url)
    client = NusModsClient(config.api_base_url, timeout=config.timeout)
    storage = Storage(config.data_dir)

    if args.command == "run":
        raise SystemExit(_cmd_run(args, config, client, storage))
    if args.command == "refresh":
        raise SystemExit(_cmd_refresh(args, config, client, storage))
    if args.command in (None, "interactive"):
        raise SystemExit(_cmd_interactive(args, config, client, storage))

    raise SystemExit(2)
