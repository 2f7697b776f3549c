"""Draw a prompt's current state with rich."""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.spinner import Spinner
from rich.table import Table
from rich.text import Text

from prisma_introspect.prompt.elements import (
    CheckboxElement,
    Element,
    SelectElement,
    SeparatorElement,
    TextInputElement,
)
from prisma_introspect.prompt.prompt import Prompt
from prisma_introspect.prompt.spinners import SpinnerState

DIVIDER_WIDTH = 50
RADIO_ON = "◉"
RADIO_OFF = "◯"
POINTER = "❯"


def render_divider(title: str | None = None, divider_char: str = "─", width: int = DIVIDER_WIDTH) -> Text:
    """A horizontal rule with an optional centered title."""
    title_string = f" {title} " if title else ""
    side = max(width - len(title_string), 0) // 2
    char_width = max(len(divider_char), 1)
    side_string = divider_char * (side // char_width)
    text = Text(" ")
    text.append(side_string, style="grey50")
    text.append(title_string)
    text.append(side_string, style="grey50")
    return text


class PromptView:
    """Renderable view of a :class:`Prompt`.

    Spinner objects are kept per element index so their animation survives
    re-renders.
    """

    def __init__(self, prompt: Prompt) -> None:
        self.prompt = prompt
        self._spinners: dict[int, Spinner] = {}

    def __call__(self) -> RenderableType:
        return self.render()

    def render(self) -> RenderableType:
        prompt = self.prompt
        rows: list[RenderableType] = []
        if prompt.title:
            rows.append(Text(prompt.title, style="bold"))
            rows.append(Text(""))
        for index, element in enumerate(prompt.elements):
            style = element.style
            rows.extend(Text("") for _ in range(style.margin_top))
            rows.append(self._render_element(index, element))
            rows.extend(Text("") for _ in range(style.margin_bottom))
        if prompt.message:
            rows.append(Text(""))
            rows.append(Text(prompt.message, style="red"))
        return Group(*rows)

    def _render_element(self, index: int, element: Element) -> RenderableType:
        focused = index == self.prompt.cursor
        if isinstance(element, TextInputElement):
            return self._render_text_input(element, focused)
        if isinstance(element, CheckboxElement):
            symbol = RADIO_ON if self.prompt.form.checked(element.identifier) else RADIO_OFF
            return Text(f" {symbol} {element.label}", style="green" if focused else "")
        if isinstance(element, SeparatorElement):
            return render_divider(element.label, element.divider_char)
        return self._render_select(index, element, focused)

    def _render_text_input(self, element: TextInputElement, focused: bool) -> Text:
        value = self.prompt.form.text(element.identifier)
        text = Text(" ")
        text.append(element.label, style="bold green" if focused else "bold")
        text.append(" ")
        if value:
            text.append(element.mask * len(value) if element.mask else value)
        elif element.placeholder:
            text.append(element.placeholder, style="dim")
        if focused:
            text.append("█", style="green")
        return text

    def _render_select(self, index: int, element: SelectElement, focused: bool) -> RenderableType:
        pointer = POINTER if focused else " "
        label = Text(f"{pointer} {element.label}", style="green" if focused else ("dim" if element.is_back_button else ""))
        if element.description:
            label.append(f"  {element.description}", style="dim")

        state = self.prompt.spinners.get(index)
        if state is None:
            self._spinners.pop(index, None)
            return label
        grid = Table.grid(padding=(0, 1))
        if state is SpinnerState.RUNNING:
            spinner = self._spinners.setdefault(index, Spinner("dots", style="green"))
            grid.add_row(label, spinner)
        else:
            self._spinners.pop(index, None)
            marker = Text("✔", style="green") if state is SpinnerState.SUCCEEDED else Text("✖", style="red")
            grid.add_row(label, marker)
        return grid
