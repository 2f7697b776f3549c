"""Shared fixtures for prisma-introspect tests."""

from __future__ import annotations

import asyncio
import io
from collections.abc import Callable, Iterable

import pytest
from rich.console import Console

DOWN = "\x1b[B"
ENTER = "\r"
CTRL_C = "\x03"


class FakeKeys:
    """Key source fed from a list; blocks forever once exhausted."""

    def __init__(self, keys: Iterable[str] = ()) -> None:
        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self.feed(keys)

    def feed(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._queue.put_nowait(key)

    async def get(self) -> str:
        return await self._queue.get()


def typed(text: str) -> list[str]:
    """Keys for typing *text* character by character."""
    return list(text)


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=100, color_system=None)


@pytest.fixture
def make_keys() -> Callable[..., FakeKeys]:
    def _make(*keys: str | list[str]) -> FakeKeys:
        flat: list[str] = []
        for key in keys:
            flat.extend(key if isinstance(key, list) else [key])
        return FakeKeys(flat)

    return _make
