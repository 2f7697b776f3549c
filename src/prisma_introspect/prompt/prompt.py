"""Keypress-driven prompt controller.

A :class:`Prompt` owns one step's element list together with its cursor,
form state and spinner states. Key events go through :meth:`Prompt.dispatch`
one at a time; select actions run as tasks on the running event loop so that
cursor movement keeps working while a connection test is in flight.

Usage::

    prompt = Prompt(elements, title="Enter the credentials", with_back_button=True)
    prompt.dispatch(KeyEvent(ActionKey.DOWN))
    prompt.dispatch(KeyEvent(ActionKey.SUBMIT))
    if prompt.result is not None:
        ...
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from functools import partial
from typing import Any

from prisma_introspect.prompt.cursor import first_focusable, move_down, move_up
from prisma_introspect.prompt.elements import (
    CheckboxElement,
    Element,
    ElementKind,
    SelectAction,
    SelectContext,
    SelectElement,
    TextInputElement,
    back_button,
    element_kind,
    validate_identifiers,
)
from prisma_introspect.prompt.form import FormState, FormValue
from prisma_introspect.prompt.keys import ActionKey, KeyEvent
from prisma_introspect.prompt.spinners import SpinnerState, SpinnerTracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromptResult:
    """What a prompt hands back when it is submitted."""

    form_values: dict[str, FormValue] = field(default_factory=dict)
    selected_value: Any = None
    go_back: bool = False


class Prompt:
    """State machine for a single prompt step."""

    def __init__(
        self,
        elements: Sequence[Element],
        *,
        title: str | None = None,
        with_back_button: bool = False,
        initial_form_values: Mapping[str, FormValue] | None = None,
    ) -> None:
        validate_identifiers(elements)
        self.title = title
        self.with_back_button = with_back_button
        self.elements: tuple[Element, ...] = tuple(elements) + ((back_button(),) if with_back_button else ())
        self.form = FormState(initial_form_values)
        self.spinners = SpinnerTracker()
        self.cursor = first_focusable(self.elements)
        self.result: PromptResult | None = None
        self.cancelled = False
        self.message: str | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._listeners: list[Callable[[], None]] = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def done(self) -> bool:
        return self.result is not None or self.cancelled

    @property
    def focused(self) -> Element | None:
        if not self.elements:
            return None
        return self.elements[self.cursor]

    @property
    def pending_actions(self) -> int:
        return len(self._tasks)

    def subscribe(self, listener: Callable[[], None]) -> None:
        """Register *listener* to be called after every state change."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener()

    # ------------------------------------------------------------------
    # Key handling
    # ------------------------------------------------------------------

    def dispatch(self, event: KeyEvent) -> None:
        """Apply one key event. Events after submission or cancellation are ignored."""
        if self.done or not self.elements:
            return

        element = self.elements[self.cursor]
        kind = element_kind(element)
        action = event.action

        if action is ActionKey.UP:
            self.cursor = move_up(self.cursor, self.elements)
        elif action is ActionKey.DOWN:
            self.cursor = move_down(self.cursor, self.elements)
        elif action is ActionKey.NEXT:
            if kind is not ElementKind.TEXT_INPUT:
                self.cursor = move_down(self.cursor, self.elements)
        elif action is ActionKey.SUBMIT:
            self._submit_focused(element)
        elif action is ActionKey.CHARACTER:
            if isinstance(element, TextInputElement):
                self.form.set(element.identifier, self.form.text(element.identifier) + event.char)
        elif action is ActionKey.BACKSPACE:
            if isinstance(element, TextInputElement):
                self.form.set(element.identifier, self.form.text(element.identifier)[:-1])
        elif action is ActionKey.CANCEL:
            self.cancelled = True

        self._notify()

    def _submit_focused(self, element: Element) -> None:
        if isinstance(element, TextInputElement):
            # A filled-in field counts as accepted; an empty one waits for input.
            if self.form.text(element.identifier):
                self.cursor = move_down(self.cursor, self.elements)
        elif isinstance(element, CheckboxElement):
            self.form.set(element.identifier, not self.form.checked(element.identifier))
        elif isinstance(element, SelectElement):
            self.select(self.cursor)
        else:
            self.cursor = move_down(self.cursor, self.elements)

    # ------------------------------------------------------------------
    # Selects and spinners
    # ------------------------------------------------------------------

    def select(self, index: int) -> asyncio.Task[None] | None:
        """Invoke the select at *index*.

        Returns the task running the select's action, or ``None`` when the
        prompt was submitted directly or the invocation was dropped because
        the action is still running.

        Raises:
            TypeError: If the element at *index* is not a select.
        """
        element = self.elements[index]
        if not isinstance(element, SelectElement):
            raise TypeError(f"Element at {index} is a {element_kind(element).value}, not a select")

        if element.is_back_button:
            self.submit(None, go_back=True)
            return None

        if element.on_select is None:
            self.submit(element.value)
            return None

        if self.spinners.is_running(index):
            logger.debug("Ignoring select %r: its action is still running", element.label)
            return None

        self.start_spinner(index)
        task = asyncio.get_running_loop().create_task(self._run_action(index, element, element.on_select))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_action(self, index: int, element: SelectElement, action: SelectAction) -> None:
        context = SelectContext(
            value=element.value,
            start_spinner=partial(self.start_spinner, index),
            stop_spinner=partial(self.finish_spinner, index),
            submit_prompt=partial(self.submit, element.value),
            report=self.report,
            form_values=self.form.values(),
        )
        try:
            outcome = action(context)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as exc:
            logger.warning("Action %r failed: %s", element.label, exc)
            self.report(str(exc))
            if self.spinners.is_running(index):
                self.finish_spinner(index, SpinnerState.FAILED)
        else:
            if self.spinners.is_running(index):
                self.finish_spinner(index, SpinnerState.SUCCEEDED)
        finally:
            self._notify()

    def start_spinner(self, index: int) -> None:
        self.spinners.start(index)
        self._notify()

    def finish_spinner(self, index: int, outcome: SpinnerState | str = SpinnerState.SUCCEEDED) -> None:
        self.spinners.finish(index, outcome)
        self._notify()

    def report(self, message: str) -> None:
        """Show *message* below the element list."""
        self.message = message
        self._notify()

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, value: Any = None, go_back: bool = False) -> None:
        """Finish the prompt with the current form values. Later calls are ignored."""
        if self.done:
            return
        self.result = PromptResult(form_values=self.form.values(), selected_value=value, go_back=go_back)
        self._notify()

    async def drain(self) -> None:
        """Wait for every running select action to settle."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def cancel_actions(self) -> None:
        for task in list(self._tasks):
            task.cancel()
