"""Scoped acquisition of the interactive terminal.

WHY: Playback needs raw keyboard input, an alternate screen and a hidden
cursor. If any of that leaks past the session (crash, quit, Ctrl-C) the
user's shell is left unusable, so acquisition and release belong in one
context manager.

HOW: interactive_terminal() picks the controlling terminal (stdin, or
/dev/tty when stdin carries the piped text), enters the alternate screen,
clears it, hides the cursor and switches the descriptor to raw mode. It
yields an (AnsiSurface, TerminalInput) pair. The finally block restores
the saved termios attributes, leaves the alternate screen and shows the
cursor again.

RULES:
- Restoration runs on every exit path, including exceptions
- A /dev/tty handle opened here is closed here
- The pacing core never calls into this module
"""

from __future__ import annotations

import logging
import sys
import termios
import tty
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TextIO

from speedreader.terminal.keys import TerminalInput
from speedreader.terminal.surface import CSI, AnsiSurface

logger = logging.getLogger(__name__)

ENTER_ALTERNATE_SCREEN = f"{CSI}?1049h"
LEAVE_ALTERNATE_SCREEN = f"{CSI}?1049l"
HIDE_CURSOR = f"{CSI}?25l"
SHOW_CURSOR = f"{CSI}?25h"

CONTROLLING_TTY = "/dev/tty"


@contextmanager
def interactive_terminal(
    output: TextIO | None = None,
) -> Iterator[tuple[AnsiSurface, TerminalInput]]:
    """Acquire the terminal for a reading session and always give it back."""
    stream = output or sys.stdout
    tty_file = None
    if sys.stdin.isatty():
        fd = sys.stdin.fileno()
    else:
        tty_file = open(CONTROLLING_TTY, "rb", buffering=0)
        fd = tty_file.fileno()

    saved_attrs = termios.tcgetattr(fd)
    surface = AnsiSurface(stream)
    try:
        surface.write(ENTER_ALTERNATE_SCREEN)
        surface.clear()
        surface.write(HIDE_CURSOR)
        surface.flush()
        tty.setraw(fd)
        logger.debug("Terminal in raw mode on fd %d", fd)

        yield surface, TerminalInput(fd)
    finally:
        try:
            termios.tcsetattr(fd, termios.TCSADRAIN, saved_attrs)
            stream.write(LEAVE_ALTERNATE_SCREEN)
            stream.write(f"{CSI}2J")
            stream.write(f"{CSI}1;1H")
            stream.write(SHOW_CURSOR)
            stream.flush()
            logger.debug("Terminal restored")
        finally:
            if tty_file is not None:
                tty_file.close()
