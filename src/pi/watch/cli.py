"""Entry point: CLI args, logging, signal handling, exit codes."""

from __future__ import annotations

import logging
import os
import re
import sys
from dataclasses import dataclass

from pi.watch import __version__
from pi.watch.config import DEFAULT_INTERVAL, WatchConfig
from pi.watch.diff import DiffMode
from pi.watch.errors import TerminationRequested, UsageError, WatchError
from pi.watch.scheduler import RedrawScheduler
from pi.watch.signals import install_signal_handlers, restore_signal_handlers
from pi.watch.terminal import ProcessTerminal

logger = logging.getLogger(__name__)

PROG = "pi-watch"

USAGE = (
    "Usage: {prog} [-dhntpv] [--differences[=cumulative]] [--help] "
    "[--interval=<n>] [--no-title] [--paging] [--version] [--8bit] <command>\n"
)

HELP = (
    "  -d, --differences[=cumulative]\thighlight changes between updates\n"
    "\t\t(cumulative means highlighting is cumulative)\n"
    "  -h, --help\t\t\t\tprint a summary of the options\n"
    "  -n, --interval=<seconds>\t\tseconds to wait between updates\n"
    "  -p, --paging\t\t\t\tscroll with arrows, PgUp/PgDn, g and G\n"
    "  -t, --no-title\t\t\tturns off showing the header\n"
    "  -v, --version\t\t\t\tprint the version number\n"
    "  -8, --8bit\t\t\t\tdraw bytes 0xA0-0xFF as Latin-1\n"
)

# long option name -> equivalent short option
_LONG_OPTIONS: dict[str, str] = {
    "differences": "d",
    "help": "h",
    "interval": "n",
    "no-title": "t",
    "version": "v",
    "paging": "p",
    "8bit": "8",
}

_FLAG_OPTIONS = frozenset("htvp8")

# Leading blanks allowed, trailing text rejected; no digit separators.
_INTERVAL_RE = re.compile(
    r"[ \t\n\v\f\r]*[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?)",
    re.ASCII | re.IGNORECASE,
)


# ============================================================================
# Arg parsing
# ============================================================================


@dataclass
class ParsedArgs:
    """Result of parsing the command line.

    ``config`` is ``None`` only when help or version output was requested
    without a command.
    """

    config: WatchConfig | None
    show_help: bool = False
    show_version: bool = False


def _match_long(name: str) -> str:
    if name in _LONG_OPTIONS:
        return _LONG_OPTIONS[name]
    candidates = [opt for opt in _LONG_OPTIONS if opt.startswith(name)]
    if len(candidates) == 1:
        return _LONG_OPTIONS[candidates[0]]
    if not candidates:
        raise UsageError(f"unrecognized option '--{name}'")
    raise UsageError(f"option '--{name}' is ambiguous")


def _parse_interval(value: str) -> float:
    if not _INTERVAL_RE.fullmatch(value):
        raise UsageError(f"invalid interval '{value}'")
    return float(value)


def _parse_differences(value: str | None) -> DiffMode:
    if value is None:
        return DiffMode.HIGHLIGHT
    if value == "cumulative":
        return DiffMode.CUMULATIVE
    raise UsageError(f"invalid argument '{value}' for '--differences'")


def parse_args(argv: list[str]) -> ParsedArgs:
    """Parse *argv* (without the program name).

    Option parsing stops at the first non-option argument, so options meant
    for the command (``pi-watch ls -l``) are left alone.  The remaining
    arguments are joined with single spaces into the command string.
    """
    interval = DEFAULT_INTERVAL
    diff_mode = DiffMode.OFF
    flags: set[str] = set()

    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--":
            i += 1
            break

        if arg.startswith("--"):
            name, eq, value = arg[2:].partition("=")
            opt = _match_long(name)
            if opt == "n":
                if not eq:
                    i += 1
                    if i >= len(argv):
                        raise UsageError("option '--interval' requires an argument")
                    value = argv[i]
                interval = _parse_interval(value)
            elif opt == "d":
                diff_mode = _parse_differences(value if eq else None)
            elif eq:
                raise UsageError(f"option '--{name}' doesn't allow an argument")
            else:
                flags.add(opt)
            i += 1
            continue

        if arg.startswith("-") and arg != "-":
            j = 1
            while j < len(arg):
                ch = arg[j]
                rest = arg[j + 1:]
                if ch == "n":
                    if not rest:
                        i += 1
                        if i >= len(argv):
                            raise UsageError("option requires an argument -- 'n'")
                        rest = argv[i]
                    interval = _parse_interval(rest)
                    break
                if ch == "d":
                    diff_mode = _parse_differences(rest or None)
                    break
                if ch not in _FLAG_OPTIONS:
                    raise UsageError(f"invalid option -- '{ch}'")
                flags.add(ch)
                j += 1
            i += 1
            continue

        break

    show_help = "h" in flags
    show_version = "v" in flags
    command_args = argv[i:]

    if not command_args:
        if show_help or show_version:
            return ParsedArgs(None, show_help, show_version)
        raise UsageError("no command given")

    config = WatchConfig(
        command=" ".join(command_args),
        interval=interval,
        diff_mode=diff_mode,
        show_title="t" not in flags,
        paging="p" in flags,
        eight_bit="8" in flags,
    )
    return ParsedArgs(config, show_help, show_version)


# ============================================================================
# Logging
# ============================================================================


def configure_logging() -> None:
    """Send log records to ``$PI_WATCH_LOG`` when it is set.

    The screen belongs to the watched command, so nothing is logged to the
    terminal.
    """
    path = os.environ.get("PI_WATCH_LOG")
    if not path:
        return
    level_name = os.environ.get("PI_WATCH_LOG_LEVEL", "info")
    logging.basicConfig(
        filename=path,
        level=getattr(logging, level_name.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


# ============================================================================
# Main
# ============================================================================


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    usage = USAGE.format(prog=PROG)

    try:
        parsed = parse_args(args)
    except UsageError as exc:
        print(f"{PROG}: {exc}", file=sys.stderr)
        sys.stderr.write(usage)
        return exc.exit_code

    if parsed.show_version:
        print(__version__, file=sys.stderr)
        if not parsed.show_help:
            return 0

    if parsed.show_help:
        sys.stderr.write(usage)
        sys.stderr.write(HELP)
        return 0

    assert parsed.config is not None
    configure_logging()
    logger.info(
        "watching %r every %.1fs (diff=%s, paging=%s)",
        parsed.config.command,
        parsed.config.interval,
        parsed.config.diff_mode.value,
        parsed.config.paging,
    )

    previous_handlers = install_signal_handlers()
    try:
        scheduler = RedrawScheduler(parsed.config, ProcessTerminal())
        scheduler.run()
    except TerminationRequested as exc:
        logger.info("%s", exc)
        return exc.exit_code
    except WatchError as exc:
        logger.error("fatal: %s", exc)
        print(f"{PROG}: {exc}", file=sys.stderr)
        return exc.exit_code
    finally:
        restore_signal_handlers(previous_handlers)
    return 0


if __name__ == "__main__":
    sys.exit(main())
