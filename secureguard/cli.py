# secureguard/cli.py
# Defines the command-line interface using argparse.

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import IO, Any, Sequence

from secureguard import __version__
from secureguard.api import UrlChecker, resolve_api_key
from secureguard.config import load_config
from secureguard.errors import PersistenceError
from secureguard.history import HistoryStore
from secureguard.models import CheckOutcome
from secureguard.storage import (
    KeyValueStore,
    StoreConfig,
    get_api_key,
    remove_api_key,
    save_api_key,
)
from secureguard.ui import (
    render_ai_section,
    render_check_header,
    render_findings,
    render_history,
    render_notices,
    render_score_line,
    render_validation_error,
)

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_STORE_ERROR = 1
EXIT_USAGE = 2


def _configure_logging(verbose: bool) -> None:
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _json_default(o: Any) -> Any:
    if is_dataclass(o):
        return asdict(o)  # type: ignore[arg-type]
    return str(o)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Score how safe a URL looks, optionally with an AI second opinion.",
        prog="secureguard",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging output to stderr.",
    )
    parser.add_argument(
        "--store-dir",
        metavar="PATH",
        default=None,
        help="Directory holding the saved API key and history.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- check ---
    check_parser = subparsers.add_parser("check", help="Check a URL and print its safety score.")
    check_parser.add_argument("url", help="The URL or bare domain to check.")
    check_parser.add_argument(
        "--api-key",
        metavar="KEY",
        default=None,
        help="AI credential for this run (default: saved key, then $GEMINI_API_KEY).",
    )
    check_parser.add_argument(
        "--no-ai",
        action="store_true",
        help="Skip the AI assessment even if a key is available.",
    )
    check_parser.add_argument(
        "--json",
        dest="json_output",
        metavar="FILEPATH",
        default=None,
        help="Also write the full result as JSON to this path.",
    )

    # --- history ---
    history_parser = subparsers.add_parser("history", help="Show or manage past checks.")
    history_parser.add_argument(
        "--search", metavar="TERM", default=None, help="Only show URLs containing TERM."
    )
    history_sub = history_parser.add_subparsers(dest="history_cmd")
    history_sub.add_parser("clear", help="Delete all history entries.")
    recheck = history_sub.add_parser("recheck", help="Check a URL from the history again.")
    recheck.add_argument("index", type=int, help="Position shown by `history`.")
    recheck.add_argument("--no-ai", action="store_true", help="Skip the AI assessment.")

    # --- key ---
    key_parser = subparsers.add_parser("key", help="Manage the saved AI API key.")
    key_sub = key_parser.add_subparsers(dest="key_cmd", required=True)
    key_set = key_sub.add_parser("set", help="Save an API key.")
    key_set.add_argument("api_key", help="The key to save.")
    key_sub.add_parser("remove", help="Forget the saved API key.")
    key_sub.add_parser("status", help="Show whether an API key is saved.")

    return parser


def _render_outcome(outcome: CheckOutcome, stdout: IO[str]) -> int:
    if outcome.result is None:
        render_validation_error(outcome.error or "Invalid input", file=stdout)
        return EXIT_USAGE
    render_score_line(outcome.result, file=stdout)
    render_findings(outcome.result, file=stdout)
    render_ai_section(outcome.result, file=stdout)
    render_notices(outcome.notices, file=stdout)
    return EXIT_OK


async def _run_check(
    url: str,
    *,
    store: KeyValueStore,
    config: dict[str, Any],
    api_key: str | None,
    use_ai: bool,
    stdout: IO[str],
    json_output: str | None = None,
) -> int:
    key = resolve_api_key(api_key, store) if use_ai else None
    checker = UrlChecker(history=HistoryStore(store), config=config)

    render_check_header(url, file=stdout)
    outcome = await checker.check(url, api_key=key)
    code = _render_outcome(outcome, stdout)

    if json_output and outcome.result is not None:
        out_path = Path(json_output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with out_path.open("w", encoding="utf-8") as f:
            json.dump(outcome.result, f, default=_json_default, indent=2)
        print(f"Full result written to {json_output}", file=stdout)
    return code


async def async_main(
    argv: Sequence[str] | None = None, stdout: IO[str] | None = None
) -> int:
    """Async entry point for the command-line interface."""
    stdout = stdout or sys.stdout
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    config = load_config()
    with KeyValueStore(StoreConfig.from_config(config, args.store_dir)) as store:
        try:
            if args.command == "check":
                return await _run_check(
                    args.url,
                    store=store,
                    config=config,
                    api_key=args.api_key,
                    use_ai=not args.no_ai,
                    stdout=stdout,
                    json_output=args.json_output,
                )

            if args.command == "key":
                if args.key_cmd == "set":
                    try:
                        save_api_key(store, args.api_key)
                    except ValueError as e:
                        render_validation_error(str(e), file=stdout)
                        return EXIT_USAGE
                    print("API key saved.", file=stdout)
                    return EXIT_OK
                if args.key_cmd == "remove":
                    remove_api_key(store)
                    print("API key removed.", file=stdout)
                    return EXIT_OK
                # status
                saved = get_api_key(store) is not None
                print("API key: saved" if saved else "API key: not set", file=stdout)
                return EXIT_OK

            # args.command == "history"
            history = HistoryStore(store)
            if args.history_cmd == "clear":
                history.clear()
                print("History cleared.", file=stdout)
                return EXIT_OK
            if args.history_cmd == "recheck":
                try:
                    record = history.get(args.index)
                except IndexError:
                    render_validation_error(f"No history entry at position {args.index}", file=stdout)
                    return EXIT_USAGE
                return await _run_check(
                    record.url,
                    store=store,
                    config=config,
                    api_key=None,
                    use_ai=not args.no_ai,
                    stdout=stdout,
                )

            if args.search:
                entries = history.search(args.search)
            else:
                entries = list(enumerate(history.list()))
            render_history(entries, file=stdout)
            return EXIT_OK
        except PersistenceError as e:
            log.error("Store error: %s", e)
            print(f"Error: {e}", file=stdout)
            return EXIT_STORE_ERROR


def main(argv: Sequence[str] | None = None) -> int:
    """Synchronous wrapper for the CLI entry point."""
    return asyncio.run(async_main(argv))


if __name__ == "__main__":
    sys.exit(main())
