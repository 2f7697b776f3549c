"""Element model for interactive prompts.

A prompt is an ordered list of elements. Text inputs and checkboxes write
into the form state under their ``identifier``; selects trigger actions or
submit the prompt; separators are inert rows the cursor never rests on.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class ElementKind(str, Enum):
    """Discriminator for the closed set of element variants."""

    TEXT_INPUT = "text-input"
    CHECKBOX = "checkbox"
    SELECT = "select"
    SEPARATOR = "separator"


@dataclass(frozen=True)
class Style:
    """Blank lines rendered around an element."""

    margin_top: int = 0
    margin_bottom: int = 0


@dataclass(frozen=True)
class TextInputElement:
    identifier: str
    label: str
    placeholder: str | None = None
    mask: str | None = None
    style: Style = field(default_factory=Style)


@dataclass(frozen=True)
class CheckboxElement:
    identifier: str
    label: str
    style: Style = field(default_factory=Style)


@dataclass(frozen=True)
class SelectElement:
    """A selectable row.

    Without ``on_select`` the prompt submits immediately with ``value``.
    With ``on_select`` the action decides when (or whether) to submit by
    calling ``SelectContext.submit_prompt``.
    """

    label: str
    value: Any = None
    description: str | None = None
    on_select: SelectAction | None = None
    is_back_button: bool = False
    style: Style = field(default_factory=Style)


@dataclass(frozen=True)
class SeparatorElement:
    label: str | None = None
    divider_char: str = "─"
    style: Style = field(default_factory=Style)


Element = Union[TextInputElement, CheckboxElement, SelectElement, SeparatorElement]


@dataclass(frozen=True)
class SelectContext:
    """Handle passed to a select action.

    The callables are bound to the select's position in the prompt, so an
    action can only drive its own spinner.
    """

    value: Any
    start_spinner: Callable[[], None]
    stop_spinner: Callable[..., None]
    submit_prompt: Callable[[], None]
    report: Callable[[str], None]
    form_values: dict[str, Any]


SelectAction = Callable[[SelectContext], Union[Awaitable[None], None]]


def element_kind(element: Element) -> ElementKind:
    """Classify *element* into exactly one variant."""
    if isinstance(element, TextInputElement):
        return ElementKind.TEXT_INPUT
    if isinstance(element, CheckboxElement):
        return ElementKind.CHECKBOX
    if isinstance(element, SelectElement):
        return ElementKind.SELECT
    if isinstance(element, SeparatorElement):
        return ElementKind.SEPARATOR
    raise TypeError(f"Unknown element type: {type(element).__name__}")


def is_text_input(element: Element) -> bool:
    return element_kind(element) is ElementKind.TEXT_INPUT


def is_checkbox(element: Element) -> bool:
    return element_kind(element) is ElementKind.CHECKBOX


def is_select(element: Element) -> bool:
    return element_kind(element) is ElementKind.SELECT


def is_separator(element: Element) -> bool:
    return element_kind(element) is ElementKind.SEPARATOR


def validate_identifiers(elements: Sequence[Element]) -> None:
    """Ensure form identifiers are unique within one element list.

    Raises:
        ValueError: On a duplicate identifier.
    """
    seen: set[str] = set()
    for element in elements:
        if isinstance(element, (TextInputElement, CheckboxElement)):
            if element.identifier in seen:
                raise ValueError(f"Duplicate element identifier: {element.identifier!r}")
            seen.add(element.identifier)


def back_button() -> SelectElement:
    """The synthesized select appended to prompts that allow going back."""
    return SelectElement(label="Back", is_back_button=True, style=Style(margin_top=1))
