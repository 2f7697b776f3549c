"""Cursor movement over an element list.

The cursor never rests on a separator and never wraps around. When no
focusable element exists in the requested direction the cursor stays put.
"""

from __future__ import annotations

from collections.abc import Sequence

from prisma_introspect.prompt.elements import Element, is_separator


def _move(cursor: int, elements: Sequence[Element], step: int) -> int:
    candidate = cursor + step
    while 0 <= candidate < len(elements):
        if not is_separator(elements[candidate]):
            return candidate
        candidate += step
    return cursor


def move_down(cursor: int, elements: Sequence[Element]) -> int:
    """Return the index of the next focusable element below *cursor*."""
    return _move(cursor, elements, 1)


def move_up(cursor: int, elements: Sequence[Element]) -> int:
    """Return the index of the next focusable element above *cursor*."""
    return _move(cursor, elements, -1)


def first_focusable(elements: Sequence[Element]) -> int:
    """Initial cursor position: the first non-separator, or 0."""
    for index, element in enumerate(elements):
        if not is_separator(element):
            return index
    return 0
