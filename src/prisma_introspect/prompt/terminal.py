"""Drive a :class:`Prompt` from the terminal.

On POSIX the terminal is switched to a key-at-a-time mode that keeps output
post-processing, so the prompt drawing still gets ``\\r\\n`` line endings,
and keys are read by the event loop through ``loop.add_reader``. On Windows
a background thread blocks on ``typer.getchar`` and hands keys to the loop.
Either way keys are dispatched strictly in arrival order while select
actions run as tasks on the same loop.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
import threading
from typing import Protocol

import typer
from rich.console import Console
from rich.live import Live

from prisma_introspect.exceptions import PromptCancelledError
from prisma_introspect.prompt.keys import decode_key, split_keys
from prisma_introspect.prompt.prompt import Prompt, PromptResult
from prisma_introspect.prompt.render import PromptView

logger = logging.getLogger(__name__)

_CANCEL_KEY = "\x03"
_POSIX = sys.platform != "win32"


class KeySource(Protocol):
    """Anything that yields raw keys asynchronously."""

    async def get(self) -> str: ...


class TerminalKeys:
    """Reads raw keys from the controlling terminal.

    Reading starts on the first :meth:`get` and feeds the queue of the loop
    it was started from. Call :meth:`close` when the interactive part is
    over so the terminal mode is restored.

    Args:
        fd: File descriptor to read from. Defaults to standard input.
    """

    def __init__(self, fd: int | None = None) -> None:
        self._fd = fd
        self._queue: asyncio.Queue[str] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._reading_fd: int | None = None
        self._mode_fd: int | None = None
        self._thread: threading.Thread | None = None
        self._stopped = threading.Event()
        self._saved_mode: list | None = None

    def _start(self) -> asyncio.Queue[str]:
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        if _POSIX:
            fd = self._fd if self._fd is not None else sys.stdin.fileno()
            self._saved_mode = _enter_key_mode(fd)
            self._mode_fd = fd if self._saved_mode is not None else None
            self._loop.add_reader(fd, self._read_available, fd)
            self._reading_fd = fd
        else:
            self._thread = threading.Thread(target=self._read_forever, name="prompt-keys", daemon=True)
            self._thread.start()
        return self._queue

    def _read_available(self, fd: int) -> None:
        assert self._loop is not None and self._queue is not None
        try:
            data = os.read(fd, 64)
        except OSError as exc:
            logger.debug("Reading keys failed: %s", exc)
            data = b""
        if not data:
            # End of input cancels whatever prompt is waiting.
            self._loop.remove_reader(fd)
            self._reading_fd = None
            self._queue.put_nowait(_CANCEL_KEY)
            return
        for key in split_keys(data.decode("utf-8", errors="replace")):
            self._queue.put_nowait(key)

    def _read_forever(self) -> None:
        while not self._stopped.is_set():
            try:
                key = typer.getchar()
            except (KeyboardInterrupt, EOFError):
                key = _CANCEL_KEY
            if self._stopped.is_set() or self._loop is None or self._queue is None:
                return
            try:
                self._loop.call_soon_threadsafe(self._queue.put_nowait, key)
            except RuntimeError:
                # The loop is closed.
                return
            if key == _CANCEL_KEY:
                return

    async def get(self) -> str:
        queue = self._queue if self._queue is not None else self._start()
        return await queue.get()

    def close(self) -> None:
        self._stopped.set()
        if self._reading_fd is not None and self._loop is not None and not self._loop.is_closed():
            self._loop.remove_reader(self._reading_fd)
        self._reading_fd = None
        if self._mode_fd is not None:
            _restore_terminal_mode(self._mode_fd, self._saved_mode)
        self._mode_fd = None
        self._saved_mode = None


def _enter_key_mode(fd: int) -> list | None:
    """Deliver keys unbuffered and unechoed on *fd*, returning the previous mode.

    Unlike ``tty.setraw`` the output flags stay untouched, so ``\\n`` is
    still written as ``\\r\\n``. Ctrl-C arrives as a key instead of SIGINT.
    Returns ``None`` when *fd* is not a terminal.
    """
    import termios

    try:
        saved = termios.tcgetattr(fd)
    except termios.error:
        return None
    mode = termios.tcgetattr(fd)
    mode[0] &= ~(termios.ICRNL | termios.IXON)
    mode[3] &= ~(termios.ECHO | termios.ICANON | termios.ISIG | termios.IEXTEN)
    mode[6][termios.VMIN] = 1
    mode[6][termios.VTIME] = 0
    termios.tcsetattr(fd, termios.TCSANOW, mode)
    return saved


def _restore_terminal_mode(fd: int, mode: list) -> None:
    import termios

    try:
        termios.tcsetattr(fd, termios.TCSADRAIN, mode)
    except (termios.error, ValueError, OSError) as exc:
        logger.debug("Could not restore terminal mode: %s", exc)


async def run_prompt(prompt: Prompt, keys: KeySource, console: Console | None = None) -> PromptResult:
    """Render *prompt* and feed it keys until it is submitted.

    Raises:
        PromptCancelledError: If the operator cancels the prompt.
    """
    console = console or Console()
    changed = asyncio.Event()
    prompt.subscribe(changed.set)
    view = PromptView(prompt)

    with Live(get_renderable=view, console=console, refresh_per_second=12, transient=False):
        next_key: asyncio.Future[str] | None = None
        while not prompt.done:
            if next_key is None:
                next_key = asyncio.ensure_future(keys.get())
            state_change = asyncio.ensure_future(changed.wait())
            finished, _ = await asyncio.wait({next_key, state_change}, return_when=asyncio.FIRST_COMPLETED)
            changed.clear()
            state_change.cancel()
            if next_key in finished:
                prompt.dispatch(decode_key(next_key.result()))
                next_key = None
        if next_key is not None:
            next_key.cancel()

        if prompt.cancelled:
            prompt.cancel_actions()
        else:
            if prompt.pending_actions:
                logger.debug("Waiting for %d running actions", prompt.pending_actions)
            await prompt.drain()

    if prompt.cancelled or prompt.result is None:
        raise PromptCancelledError()
    return prompt.result
