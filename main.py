#!/usr/bin/env python3
"""termtype - terminal typing practice with result history."""

import argparse
import curses
import logging
import os
import sys
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable, Optional

from core.errors import PersistenceError, TermTypeError
from core.history import HistoryStore
from core.languages import list_languages, load_language, load_language_file, read_content
from core.models import HistoryQuery, ResultSummary
from core.typing_session import SessionModes
from core.validation import validate_date_range
from core.word_source import RandomSample, from_content, generate
from ui.history_view import format_history, format_stats
from ui.terminal import run_interactive
from utils.config import Config
from utils.paths import state_dir

log = logging.getLogger("termtype")


def setup_logging(debug: bool = False) -> logging.Handler:
    """Configure file and console logging.

    Returns:
        The console handler, so it can be detached while curses owns the screen
    """
    log_dir = state_dir()
    handlers: list[logging.Handler] = []
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        # Rotating file handler (5MB max, keep 5 backups)
        handlers.append(
            RotatingFileHandler(
                log_dir / "termtype.log", maxBytes=5 * 1024 * 1024, backupCount=5
            )
        )
    except OSError as e:
        print(f"Warning: cannot write log file in {log_dir}: {e}", file=sys.stderr)

    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG if debug else logging.WARNING)
    handlers.append(console)

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )
    return console


@contextmanager
def console_logging_detached(handler: logging.Handler):
    """Keep log output off the terminal while curses draws on it."""
    root = logging.getLogger()
    root.removeHandler(handler)
    try:
        yield
    finally:
        root.addHandler(handler)


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="termtype", description="Terminal typing practice with result history."
    )
    parser.add_argument(
        "contents",
        nargs="?",
        metavar="PATH",
        help='Read test contents from the specified file, or "-" for stdin',
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Verbose logging")
    parser.add_argument(
        "-w", "--words", type=positive_int, metavar="N", help="Specify word count"
    )
    parser.add_argument("-c", "--config", type=Path, metavar="PATH", help="Use config file")
    parser.add_argument(
        "--language-file", type=Path, metavar="PATH", help="Specify test language in file"
    )
    parser.add_argument("-l", "--language", metavar="LANG", help="Specify test language")
    parser.add_argument(
        "--list-languages", action="store_true", help="List installed languages"
    )
    parser.add_argument(
        "--no-backtrack", action="store_true", help="Disable backtracking to completed words"
    )
    parser.add_argument(
        "--sudden-death",
        action="store_true",
        help="Enable sudden death mode to restart on first error",
    )
    parser.add_argument(
        "--case-insensitive", action="store_true", help="Ignore letter case"
    )
    parser.add_argument(
        "--seed", type=int, metavar="N", help="Random seed for reproducible word selection"
    )
    parser.add_argument(
        "--no-save", action="store_true", help="Disable saving results to history"
    )

    history = parser.add_argument_group("history")
    history.add_argument("--history", action="store_true", help="Show history of past results")
    history.add_argument(
        "--last", type=non_negative_int, metavar="N", help="Show only the last N history entries"
    )
    history.add_argument("--history-lang", metavar="LANG", help="Filter history by language")
    history.add_argument("--since", metavar="DATE", help="Filter history from date (YYYY-MM-DD)")
    history.add_argument("--until", metavar="DATE", help="Filter history until date (YYYY-MM-DD)")
    history.add_argument(
        "--stats",
        action="store_true",
        help="Show aggregated statistics instead of raw history",
    )
    return parser


def has_history_filters(args: argparse.Namespace) -> bool:
    """True if any option that only applies to --history was given."""
    return (
        args.last is not None
        or args.history_lang is not None
        or args.since is not None
        or args.until is not None
        or args.stats
    )


def effective_language(args: argparse.Namespace, config: Config) -> str:
    """Language tag recorded in history for this run."""
    if args.contents is not None:
        return "custom" if args.contents == "-" else Path(args.contents).name
    if args.language_file is not None:
        return args.language_file.name
    return args.language or config.settings.default_language


def word_factory(args: argparse.Namespace, config: Config) -> Callable[[], list[str]]:
    """Resolve test content once and return a generator of new word lists.

    Raises:
        TermTypeError: If the content or language cannot be loaded or is empty
    """
    settings = config.settings

    if args.contents is not None:
        words = from_content(read_content(args.contents))
        return lambda: list(words)

    if args.language_file is not None:
        language = load_language_file(args.language_file)
    else:
        language = load_language(
            args.language or settings.default_language, config.language_dir
        )

    seed = args.seed if args.seed is not None else settings.random_seed
    count = args.words or settings.word_count
    state = {"seed": seed}

    def make_words() -> list[str]:
        source = RandomSample(
            count=count,
            words=language,
            allow_repeats=settings.allow_repeats,
            seed=state["seed"],
        )
        # A fixed seed reproduces the first test; later ones still vary
        if state["seed"] is not None:
            state["seed"] += 1
        return generate(source)

    return make_words


def show_history(args: argparse.Namespace, store: HistoryStore) -> int:
    since, until = validate_date_range(args.since, args.until)
    query = HistoryQuery(
        language=args.history_lang, since=since, until=until, last=args.last
    )
    if args.stats:
        lines = format_stats(store.aggregate(query), query)
    else:
        lines = format_history(store.query(query), query, store.path)
    print("\n".join(lines))
    return 0


def save_callback(
    store: Optional[HistoryStore], language: str
) -> Callable[[ResultSummary], Optional[str]]:
    """Persist each completed result; return a warning when saving fails."""

    def on_complete(summary: ResultSummary) -> Optional[str]:
        if store is None:
            return None
        try:
            store.save(summary, language)
        except PersistenceError as e:
            log.warning(f"Result not saved: {e}")
            return f"Result not saved: {e}"
        return None

    return on_complete


def run(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    console = setup_logging(args.debug)
    log.debug(f"Arguments: {args}")

    try:
        config = Config(args.config)
        log.debug(f"Settings: {config.settings}")

        if args.list_languages:
            print("\n".join(list_languages(config.language_dir)))
            return 0

        store = HistoryStore(config.history_path)

        if has_history_filters(args) and not args.history:
            print(
                "Error: --last, --history-lang, --since, --until, and --stats "
                "require --history flag",
                file=sys.stderr,
            )
            return 1
        if args.history:
            return show_history(args, store)

        make_words = word_factory(args, config)
        # Fails before any UI is shown if the word list is empty
        pending = [make_words()]
        settings = config.settings
        modes = SessionModes(
            backtrack_enabled=settings.backtrack_enabled and not args.no_backtrack,
            sudden_death=settings.sudden_death or args.sudden_death,
            case_insensitive=settings.case_insensitive or args.case_insensitive,
        )
        save = settings.save_history and not args.no_save
        on_complete = save_callback(
            store if save else None, effective_language(args, config)
        )
    except TermTypeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.contents == "-" and not reattach_stdin():
        print(
            "Error: Piped input requires an available terminal (/dev/tty).",
            file=sys.stderr,
        )
        return 1

    def next_words() -> list[str]:
        return pending.pop() if pending else make_words()

    try:
        with console_logging_detached(console):
            curses.wrapper(run_interactive, next_words, modes, on_complete)
    except KeyboardInterrupt:
        log.debug("Interrupted, quitting")
    return 0


def reattach_stdin() -> bool:
    """Point file descriptor 0 back at the terminal after content was piped in.

    curses reads keys from descriptor 0, which is at EOF once stdin was consumed.
    """
    if sys.stdin.isatty():
        return True
    try:
        tty_fd = os.open("/dev/tty", os.O_RDONLY)
        os.dup2(tty_fd, 0)
        os.close(tty_fd)
    except OSError as e:
        log.error(f"Cannot open terminal for keyboard input: {e}")
        return False
    return True


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
