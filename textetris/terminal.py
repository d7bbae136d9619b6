"""Terminal control: raw keyboard input, screen clearing, sleeping, UTF-8 setup."""

from __future__ import annotations

import locale
import logging
import os
import select
import sys
import time
from typing import IO, Optional

try:
    import termios
except ImportError:  # not available on Windows
    termios = None  # type: ignore[assignment]

try:
    import msvcrt
except ImportError:  # only available on Windows
    msvcrt = None  # type: ignore[assignment]

__all__ = ["Keyboard", "clear_screen", "sleep_us", "init_platform"]

log = logging.getLogger(__name__)

_WINDOWS = os.name == "nt"
_CLEAR = "\033[H\033[J"
_UTF8_SELECT = "\x1b%G"


class Keyboard:
    """Unbuffered, unechoed key input for the length of a ``with`` block.

    With no stream the process's standard input is used; on Windows that
    goes through the console. A given stream is read through its file
    descriptor, and raw mode is only switched on when it is a terminal.
    """

    def __init__(self, stream: Optional[IO[str]] = None) -> None:
        self._stream = stream if stream is not None else sys.stdin
        self._console = msvcrt if (_WINDOWS and stream is None) else None
        self._saved: Optional[list] = None

    def _fd(self) -> int:
        return self._stream.fileno()

    def __enter__(self) -> "Keyboard":
        if self._console is not None or termios is None:
            return self
        fd = self._fd()
        if not os.isatty(fd):
            return self
        self._saved = termios.tcgetattr(fd)
        raw = termios.tcgetattr(fd)
        raw[3] &= ~(termios.ICANON | termios.ECHO)
        raw[6][termios.VMIN] = 1
        raw[6][termios.VTIME] = 0
        termios.tcsetattr(fd, termios.TCSANOW, raw)
        return self

    def __exit__(self, *args) -> None:
        if self._saved is not None and termios is not None:
            termios.tcsetattr(self._fd(), termios.TCSANOW, self._saved)
            self._saved = None

    def key_pressed(self) -> bool:
        """True when a key is waiting to be read."""
        if self._console is not None:
            return bool(self._console.kbhit())
        ready, _, _ = select.select([self._fd()], [], [], 0)
        return bool(ready)

    def read_key(self) -> str:
        """Block until a key arrives and return it; EOFError if input has ended."""
        if self._console is not None:
            return self._console.getwch()
        data = os.read(self._fd(), 1)
        if not data:
            raise EOFError("keyboard input closed")
        return data.decode("utf-8", errors="replace")


def clear_screen(out: Optional[IO[str]] = None) -> None:
    """Clear the terminal and move the cursor home."""
    target = out if out is not None else sys.stdout
    target.write(_CLEAR)
    target.flush()


def sleep_us(microseconds: int) -> None:
    """Sleep for the given number of microseconds."""
    if microseconds < 0:
        raise ValueError("microseconds must not be negative")
    time.sleep(microseconds / 1_000_000)


def init_platform() -> None:
    """Prepare standard output and the C locale for UTF-8."""
    target = sys.stdout
    if _WINDOWS:
        reconfigure = getattr(target, "reconfigure", None)
        if reconfigure is not None:
            try:
                reconfigure(encoding="utf-8")
            except (ValueError, OSError):
                log.warning("Could not switch output to UTF-8.")
        try:
            locale.setlocale(locale.LC_ALL, ".UTF8")
        except locale.Error:
            log.warning("Cannot set locale to .UTF8.")
        return
    target.write(_UTF8_SELECT)
    target.flush()
    try:
        locale.setlocale(locale.LC_ALL, "en_US.UTF-8")
    except locale.Error:
        log.warning("Cannot set locale to en_US.UTF-8. Is it installed?")