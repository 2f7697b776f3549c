"""Translate raw terminal keys into prompt actions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class ActionKey(str, Enum):
    UP = "up"
    DOWN = "down"
    NEXT = "next"
    SUBMIT = "submit"
    BACKSPACE = "backspace"
    CHARACTER = "character"
    CANCEL = "cancel"
    IGNORED = "ignored"


@dataclass(frozen=True)
class KeyEvent:
    action: ActionKey
    char: str = ""


# Sequences as returned by the terminal on POSIX and by ``click.getchar`` on Windows.
_SEQUENCES: dict[str, ActionKey] = {
    "\x1b[A": ActionKey.UP,
    "\x1bOA": ActionKey.UP,
    "\xe0H": ActionKey.UP,
    "\x00H": ActionKey.UP,
    "\x1b[B": ActionKey.DOWN,
    "\x1bOB": ActionKey.DOWN,
    "\xe0P": ActionKey.DOWN,
    "\x00P": ActionKey.DOWN,
    "\t": ActionKey.NEXT,
    "\r": ActionKey.SUBMIT,
    "\n": ActionKey.SUBMIT,
    "\x7f": ActionKey.BACKSPACE,
    "\x08": ActionKey.BACKSPACE,
    "\x1b": ActionKey.CANCEL,
    "\x03": ActionKey.CANCEL,
}


def decode_key(raw: str) -> KeyEvent:
    """Map one raw key (possibly a multi-byte escape sequence) to a :class:`KeyEvent`."""
    action = _SEQUENCES.get(raw)
    if action is not None:
        return KeyEvent(action)
    if raw and raw.isprintable():
        return KeyEvent(ActionKey.CHARACTER, raw)
    return KeyEvent(ActionKey.IGNORED)


# One escape sequence (CSI or SS3) or any single character.
_KEY_RE = re.compile(r"\x1b(?:\[[0-9;]*[A-Za-z~]|O[A-Za-z])|.", re.DOTALL)


def split_keys(chunk: str) -> list[str]:
    """Split one terminal read into single keys, keeping escape sequences whole.

    >>> split_keys("ab\\x1b[B")
    ['a', 'b', '\\x1b[B']
    """
    return _KEY_RE.findall(chunk)
