"""Tests for rendering prompts with rich."""

import io

from rich.console import Console

from prisma_introspect.prompt.elements import (
    CheckboxElement,
    SelectElement,
    SeparatorElement,
    TextInputElement,
)
from prisma_introspect.prompt.prompt import Prompt
from prisma_introspect.prompt.render import PromptView, render_divider
from prisma_introspect.prompt.spinners import SpinnerState


def _render(prompt: Prompt) -> str:
    console = Console(file=io.StringIO(), width=80, color_system=None)
    console.print(PromptView(prompt).render())
    return console.file.getvalue()


def _prompt(**kwargs) -> Prompt:
    return Prompt(
        [
            TextInputElement(identifier="host", label="Host:", placeholder="localhost"),
            TextInputElement(identifier="password", label="Password:", mask="*"),
            CheckboxElement(identifier="ssl", label="Enable SSL ?"),
            SeparatorElement(divider_char="-"),
            SelectElement(label="Test", description="Test the database connection"),
        ],
        title="Enter the Postgres credentials",
        **kwargs,
    )


class TestPromptView:
    def test_title_and_placeholder(self):
        output = _render(_prompt())
        assert "Enter the Postgres credentials" in output
        assert "Host: localhost" in output

    def test_password_is_masked(self):
        output = _render(_prompt(initial_form_values={"password": "secret"}))
        assert "******" in output
        assert "secret" not in output

    def test_checkbox_state(self):
        assert "◯ Enable SSL ?" in _render(_prompt())
        assert "◉ Enable SSL ?" in _render(_prompt(initial_form_values={"ssl": True}))

    def test_pointer_on_focused_select(self):
        prompt = _prompt()
        prompt.cursor = 4
        assert "❯ Test" in _render(prompt)

    def test_spinner_outcomes(self):
        prompt = _prompt()
        prompt.spinners.start(4)
        prompt.spinners.finish(4, SpinnerState.SUCCEEDED)
        assert "✔" in _render(prompt)
        prompt.spinners.finish(4, SpinnerState.FAILED)
        assert "✖" in _render(prompt)

    def test_message_shown(self):
        prompt = _prompt()
        prompt.report("Could not connect to database.")
        assert "Could not connect to database." in _render(prompt)

    def test_back_button_rendered(self):
        assert "Back" in _render(_prompt(with_back_button=True))


def test_render_divider_with_title():
    text = render_divider("Title", "-", width=20).plain
    assert " Title " in text
    assert text.count("-") == 12


def test_render_divider_plain():
    assert render_divider(None, "─", width=10).plain == " " + "─" * 10
