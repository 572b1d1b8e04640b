"""Command-line interface for speedreader.

WHY: Users speed read from the terminal: point the tool at a file (or
pipe text in), read at a chosen pace, then optionally check their
comprehension. The CLI wires together config loading, text input, the
terminal session, summary collection and the evaluation call.

HOW: argparse handles --file, --wpm, --init-config and --log-file. The
terminal size is captured once, then the pacing core runs inside
interactive_terminal(), which restores the terminal on every exit path.
A completed session prompts for a summary (rich Console) and runs the
async evaluation via asyncio.run() under a rich status spinner.

RULES:
- Text comes from --file, else stdin; blank text is an error
- --wpm overrides the configured starting pace, clamped to range
- Logging goes to --log-file when given; otherwise only warnings reach
  stderr so the alternate screen is never scribbled on
- Every failure prints one "Error: ..." line to stderr and exits 1
- Ctrl-C outside playback exits 130
- A cancelled session exits 0 without asking for a summary
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import shutil
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from rich.console import Console
from rich.markdown import Markdown

from speedreader import __version__
from speedreader.api.client import EvaluationAPIError, EvaluationClient
from speedreader.api.models import EvaluationResponseError
from speedreader.config import Config, get_config_path
from speedreader.core.pacer import speed_read
from speedreader.core.session import SessionResult
from speedreader.errors import ConfigError, SpeedReaderError
from speedreader.terminal.session import CONTROLLING_TTY, interactive_terminal

logger = logging.getLogger(__name__)

console = Console()


def _error(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr, flush=True)


def _configure_logging(log_file: Optional[str]) -> None:
    """Send DEBUG logs to a file, or only warnings to stderr."""
    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    if log_file:
        logging.basicConfig(filename=log_file, level=logging.DEBUG, format=fmt)
    else:
        logging.basicConfig(level=logging.WARNING, format=fmt)


def _read_text(file_path: Optional[str]) -> str:
    """Read the source text from a file or stdin, exiting on failure."""
    if file_path:
        path = Path(file_path)
        if not path.is_file():
            _error("The file '{}' does not exist.".format(file_path))
            sys.exit(1)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            _error("Failed to read '{}': {}".format(file_path, e))
            sys.exit(1)

    try:
        return sys.stdin.read()
    except (OSError, UnicodeDecodeError) as e:
        _error("Failed to read from stdin: {}".format(e))
        sys.exit(1)


def _collect_summary() -> str:
    """Ask for a multi-line summary, ended by an empty line.

    When stdin carried the text, the summary is read from the
    controlling terminal instead.
    """
    if sys.stdin.isatty():
        return _read_summary(None)
    with open(CONTROLLING_TTY, encoding="utf-8") as tty_stream:
        return _read_summary(tty_stream)


def _read_summary(stream: Optional[TextIO]) -> str:
    console.print("Please enter your summary of the text. Press Enter on an empty line to finish.")
    console.print("Enter your summary below:")

    lines: List[str] = []
    while True:
        try:
            line = console.input(stream=stream).rstrip()
        except EOFError:
            break
        if not line:
            break
        lines.append(line)

    return "\n".join(lines)


async def _evaluate(summary: str, text: str, wpm: int, config: Config) -> str:
    """Run the evaluation request under a spinner and return the assessment."""
    with console.status("Setting up evaluation...", spinner="dots") as status:
        async with EvaluationClient(model=config.model) as client:
            response = await client.evaluate(summary, text, wpm, on_status=status.update)
    console.print("AI analysis complete!", style="bold green")
    return response


def _run_session(text: str, config: Config) -> SessionResult:
    """Run one reading session on the terminal, exiting 1 on failure."""
    size = shutil.get_terminal_size()
    logger.debug("Terminal size %dx%d", size.columns, size.lines)

    try:
        with interactive_terminal() as (surface, input_source):
            return speed_read(
                text,
                config,
                surface,
                input_source,
                (size.columns, size.lines),
            )
    except (SpeedReaderError, OSError) as e:
        logger.debug("Reading session failed", exc_info=True)
        _error("Error during speed reading: {}".format(e))
        sys.exit(1)


def _run(args: argparse.Namespace) -> None:
    if args.init_config:
        try:
            path = Config().save()
        except ConfigError as e:
            _error(str(e))
            sys.exit(1)
        print("Default configuration created at: {}".format(path))
        return

    try:
        config = Config.from_args(args)
    except ConfigError as e:
        _error("{} ({})".format(e, get_config_path()))
        sys.exit(1)

    text = _read_text(args.file)
    if not text.strip():
        _error("No text provided. Please provide a file with text or pipe text to stdin.")
        sys.exit(1)

    result = _run_session(text, config)
    if not result.success or result.wpm is None:
        return

    summary = _collect_summary()
    if not summary.strip():
        console.print("No summary provided. Exiting.")
        return

    try:
        response = asyncio.run(_evaluate(summary, text, result.wpm, config))
    except (EvaluationAPIError, EvaluationResponseError, ValueError) as e:
        # ValueError covers a missing API key.
        _error(str(e))
        sys.exit(1)
    except Exception as e:
        logger.debug("Evaluation request failed", exc_info=True)
        _error("Evaluation request failed: {}".format(e))
        sys.exit(1)

    console.print(Markdown(response))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    RULES:
    - Optional: --file, --wpm, --init-config, --log-file
    - No positional arguments; text defaults to stdin
    """
    parser = argparse.ArgumentParser(
        prog="speedreader",
        description="Speed read a text in the terminal one word at a time, "
                    "then check your comprehension with an AI evaluation.",
    )

    parser.add_argument(
        "-f", "--file",
        default=None,
        help="Path of the text file to speed read (default: read stdin).",
    )

    parser.add_argument(
        "--wpm",
        type=int,
        default=None,
        help="Starting words per minute (overrides the config file).",
    )

    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Write a default config file and exit.",
    )

    parser.add_argument(
        "--log-file",
        default=None,
        help="Write debug logs to this file.",
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s {}".format(__version__),
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m speedreader`` and the console script.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_file)

    try:
        _run(args)
    except KeyboardInterrupt:
        print("\nCancelled by user.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    main()
