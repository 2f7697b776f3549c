"""Tests for raw key decoding."""

import pytest

from prisma_introspect.prompt.keys import ActionKey, KeyEvent, decode_key, split_keys


@pytest.mark.parametrize(
    ("raw", "action"),
    [
        ("\x1b[A", ActionKey.UP),
        ("\xe0H", ActionKey.UP),
        ("\x1b[B", ActionKey.DOWN),
        ("\x00P", ActionKey.DOWN),
        ("\t", ActionKey.NEXT),
        ("\r", ActionKey.SUBMIT),
        ("\n", ActionKey.SUBMIT),
        ("\x7f", ActionKey.BACKSPACE),
        ("\x03", ActionKey.CANCEL),
        ("\x1b", ActionKey.CANCEL),
    ],
)
def test_control_sequences(raw, action):
    assert decode_key(raw) == KeyEvent(action)


def test_printable_character():
    assert decode_key("a") == KeyEvent(ActionKey.CHARACTER, "a")
    assert decode_key(" ") == KeyEvent(ActionKey.CHARACTER, " ")


def test_unknown_sequence_ignored():
    assert decode_key("\x1b[5~").action is ActionKey.IGNORED
    assert decode_key("").action is ActionKey.IGNORED


def test_split_keys_keeps_sequences_whole():
    assert split_keys("ab\x1b[B\x1b[A\r") == ["a", "b", "\x1b[B", "\x1b[A", "\r"]


def test_split_keys_lone_escape():
    assert split_keys("\x1b") == ["\x1b"]
