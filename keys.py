"""Raw terminal key input, normalized to key names"""

import os
import select
import sys
import threading
from typing import Optional, TextIO

from constants import CANCEL_POLL_INTERVAL, ESCAPE_TIMEOUT, HIDE_CURSOR, SHOW_CURSOR
from exceptions import SessionCancelled, SessionError
from logger import get_logger

KEY_NAMES = {
    '\r': 'enter',
    '\n': 'enter',
    '\t': 'tab',
    '\x1b[Z': 'shift+tab',
    '\x1b': 'esc',
    '\x03': 'ctrl+c',
    '\x7f': 'backspace',
    '\x08': 'backspace',
    '\x1b[A': 'up',
    '\x1b[B': 'down',
    '\x1b[C': 'right',
    '\x1b[D': 'left',
    # Application cursor mode
    '\x1bOA': 'up',
    '\x1bOB': 'down',
    '\x1bOC': 'right',
    '\x1bOD': 'left',
}


def decode_key(raw: str) -> str:
    """Map a raw key sequence to its name; plain characters map to themselves"""
    if raw in KEY_NAMES:
        return KEY_NAMES[raw]
    if raw.startswith('\x1b'):
        # Unrecognised escape sequence (F-keys, Home, ...)
        return 'unknown'
    return raw


class TerminalKeySource:
    """Exclusive raw-mode access to the terminal for the length of a session"""

    def __init__(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None,
                 cancel_event: Optional[threading.Event] = None):
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.cancel_event = cancel_event
        self.logger = get_logger(self.__class__.__name__)
        self._fd = None
        self._old_settings = None

    @property
    def interactive(self) -> bool:
        try:
            return self.stdin.isatty()
        except ValueError:
            return False

    def __enter__(self) -> 'TerminalKeySource':
        if self.interactive:
            import termios
            import tty
            try:
                self._fd = self.stdin.fileno()
                self._old_settings = termios.tcgetattr(self._fd)
                tty.setraw(self._fd)
            except (OSError, termios.error) as e:
                self._restore()
                raise SessionError(f"Could not acquire terminal: {e}")
        self.stdout.write(HIDE_CURSOR)
        self.stdout.flush()
        return self

    def __exit__(self, exc_type, exc, tb):
        self._restore()
        self.stdout.write(SHOW_CURSOR)
        self.stdout.flush()
        return False

    def _restore(self):
        if self._old_settings is not None:
            import termios
            try:
                termios.tcsetattr(self._fd, termios.TCSADRAIN, self._old_settings)
            except (OSError, termios.error) as e:
                self.logger.warning(f"Could not restore terminal settings: {e}")
            self._old_settings = None
        self._fd = None

    def _read_char(self) -> str:
        # os.read bypasses the TextIO buffer so select() sees pending bytes
        data = os.read(self._fd, 1)
        if not data:
            raise SessionError("Terminal input closed")
        return data.decode('utf-8', errors='replace')

    def _pending(self, timeout: float = ESCAPE_TIMEOUT) -> bool:
        ready, _, _ = select.select([self._fd], [], [], timeout)
        return bool(ready)

    def _wait_for_input(self):
        """Wait for the first byte of a key, giving up once the session is cancelled"""
        while not self._pending(CANCEL_POLL_INTERVAL):
            if self.cancel_event is not None and self.cancel_event.is_set():
                self.logger.info("Cancelled while waiting for a key")
                raise SessionCancelled("Session cancelled")

    def read_key(self) -> str:
        """Block until the next key and return its name"""
        if not self.interactive:
            return self._read_line_key()
        if self._fd is None:
            raise SessionError("Terminal was not acquired before reading keys")

        try:
            self._wait_for_input()
            key = self._read_char()
            if key == '\x1b':
                # Standalone Escape unless the rest of a sequence follows quickly
                if self._pending():
                    key += self._read_char()
                    if key[-1] in '[O' and self._pending():
                        key += self._read_char()
        except KeyboardInterrupt:
            return 'ctrl+c'
        except OSError as e:
            raise SessionError(f"Could not read from terminal: {e}")
        return decode_key(key)

    def _read_line_key(self) -> str:
        """Fallback for non-interactive input: one key name or character per line"""
        try:
            line = self.stdin.readline()
        except KeyboardInterrupt:
            return 'ctrl+c'
        except OSError as e:
            raise SessionError(f"Could not read input: {e}")
        if line == '':
            raise SessionError("Input closed before the session finished")
        line = line.rstrip('\n')
        return decode_key(line) if line else 'enter'
