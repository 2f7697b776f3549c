"""Tests for the keypress-driven prompt controller."""

import asyncio

import pytest

from prisma_introspect.prompt.elements import (
    CheckboxElement,
    SelectElement,
    SeparatorElement,
    TextInputElement,
)
from prisma_introspect.prompt.keys import ActionKey, KeyEvent
from prisma_introspect.prompt.prompt import Prompt
from prisma_introspect.prompt.spinners import SpinnerState

UP = KeyEvent(ActionKey.UP)
DOWN = KeyEvent(ActionKey.DOWN)
NEXT = KeyEvent(ActionKey.NEXT)
SUBMIT = KeyEvent(ActionKey.SUBMIT)
BACKSPACE = KeyEvent(ActionKey.BACKSPACE)
CANCEL = KeyEvent(ActionKey.CANCEL)


def _type(prompt: Prompt, text: str) -> None:
    for char in text:
        prompt.dispatch(KeyEvent(ActionKey.CHARACTER, char))


def _form_prompt(**kwargs) -> Prompt:
    return Prompt(
        [
            TextInputElement(identifier="host", label="Host:"),
            CheckboxElement(identifier="ssl", label="SSL"),
            SeparatorElement(),
            SelectElement(label="Done", value="done"),
        ],
        **kwargs,
    )


class TestConstruction:
    def test_cursor_starts_on_first_focusable(self):
        prompt = Prompt([SeparatorElement(), SelectElement(label="a")])
        assert prompt.cursor == 1

    def test_back_button_appended_last(self):
        prompt = _form_prompt(with_back_button=True)
        assert prompt.elements[-1].is_back_button
        assert len(prompt.elements) == 5

    def test_duplicate_identifiers_rejected(self):
        with pytest.raises(ValueError):
            Prompt([TextInputElement(identifier="x", label="X"), TextInputElement(identifier="x", label="Y")])

    def test_initial_form_values_seed_state(self):
        prompt = _form_prompt(initial_form_values={"host": "db", "type": "postgres"})
        assert prompt.form.text("host") == "db"
        assert prompt.form.get("type") == "postgres"


class TestNavigation:
    def test_down_skips_separator(self):
        prompt = _form_prompt()
        prompt.dispatch(DOWN)
        prompt.dispatch(DOWN)
        assert prompt.cursor == 3
        prompt.dispatch(UP)
        assert prompt.cursor == 1

    def test_next_on_text_input_stays(self):
        prompt = _form_prompt()
        prompt.dispatch(NEXT)
        assert prompt.cursor == 0

    def test_next_on_checkbox_moves_down(self):
        prompt = _form_prompt()
        prompt.dispatch(DOWN)
        prompt.dispatch(NEXT)
        assert prompt.cursor == 3


class TestTextInput:
    def test_typing_and_backspace(self):
        prompt = _form_prompt()
        _type(prompt, "localhostx")
        prompt.dispatch(BACKSPACE)
        assert prompt.form.text("host") == "localhost"

    def test_submit_on_empty_input_is_noop(self):
        prompt = _form_prompt()
        prompt.dispatch(SUBMIT)
        assert prompt.cursor == 0
        assert not prompt.done

    def test_submit_on_filled_input_moves_down(self):
        prompt = _form_prompt()
        _type(prompt, "db")
        prompt.dispatch(SUBMIT)
        assert prompt.cursor == 1

    def test_characters_ignored_off_text_input(self):
        prompt = _form_prompt()
        prompt.dispatch(DOWN)
        _type(prompt, "abc")
        assert prompt.form.values() == {}


class TestCheckbox:
    def test_submit_toggles(self):
        prompt = _form_prompt()
        prompt.dispatch(DOWN)
        prompt.dispatch(SUBMIT)
        assert prompt.form.checked("ssl") is True
        prompt.dispatch(SUBMIT)
        assert prompt.form.checked("ssl") is False
        assert prompt.cursor == 1


class TestSelect:
    def test_select_without_action_submits_value(self):
        prompt = _form_prompt()
        _type(prompt, "db")
        prompt.dispatch(DOWN)
        prompt.dispatch(DOWN)
        prompt.dispatch(SUBMIT)
        assert prompt.done
        assert prompt.result.selected_value == "done"
        assert prompt.result.form_values == {"host": "db"}
        assert prompt.result.go_back is False

    def test_back_button_submits_go_back(self):
        prompt = _form_prompt(with_back_button=True, initial_form_values={"host": "db"})
        prompt.select(len(prompt.elements) - 1)
        assert prompt.result.go_back is True
        assert prompt.result.form_values == {"host": "db"}

    def test_select_on_non_select_raises(self):
        prompt = _form_prompt()
        with pytest.raises(TypeError):
            prompt.select(0)

    def test_keys_after_submit_ignored(self):
        prompt = _form_prompt()
        prompt.submit("x")
        prompt.dispatch(DOWN)
        _type(prompt, "abc")
        assert prompt.cursor == 0
        assert prompt.result.form_values == {}

    def test_second_submit_ignored(self):
        prompt = _form_prompt()
        prompt.submit("first")
        prompt.submit("second", go_back=True)
        assert prompt.result.selected_value == "first"
        assert prompt.result.go_back is False


class TestSelectActions:
    async def test_spinner_starts_synchronously(self):
        release = asyncio.Event()

        async def action(context):
            await release.wait()

        prompt = Prompt([SelectElement(label="Test", on_select=action)])
        task = prompt.select(0)
        assert prompt.spinners.is_running(0)
        assert prompt.pending_actions == 1
        release.set()
        await task
        assert prompt.spinners.get(0) is SpinnerState.SUCCEEDED
        assert prompt.pending_actions == 0

    async def test_second_invocation_while_running_is_dropped(self):
        release = asyncio.Event()
        calls = []

        async def action(context):
            calls.append(context.value)
            await release.wait()

        prompt = Prompt([SelectElement(label="Test", value="test", on_select=action)])
        first = prompt.select(0)
        await asyncio.sleep(0)
        assert prompt.select(0) is None
        prompt.dispatch(SUBMIT)
        await asyncio.sleep(0)
        assert calls == ["test"]

        release.set()
        await first
        prompt.select(0)
        await prompt.drain()
        assert calls == ["test", "test"]

    async def test_keys_dispatch_while_action_runs(self):
        release = asyncio.Event()

        async def action(context):
            await release.wait()

        prompt = Prompt([SelectElement(label="Test", on_select=action), SelectElement(label="Other")])
        prompt.select(0)
        prompt.dispatch(DOWN)
        assert prompt.cursor == 1
        release.set()
        await prompt.drain()

    async def test_failing_action_marks_spinner_failed(self):
        async def action(context):
            raise RuntimeError("connection refused")

        prompt = Prompt([SelectElement(label="Test", on_select=action)])
        await prompt.select(0)
        assert prompt.spinners.get(0) is SpinnerState.FAILED
        assert prompt.message == "connection refused"
        assert not prompt.done

    async def test_action_controls_its_spinner(self):
        async def action(context):
            context.stop_spinner(SpinnerState.FAILED)
            context.report("nope")

        prompt = Prompt([SelectElement(label="Test", on_select=action)])
        await prompt.select(0)
        assert prompt.spinners.get(0) is SpinnerState.FAILED
        assert prompt.message == "nope"

    async def test_action_submits_prompt(self):
        async def action(context):
            assert context.form_values == {"host": "db"}
            context.submit_prompt()

        prompt = Prompt(
            [TextInputElement(identifier="host", label="Host:"), SelectElement(label="Go", value="go", on_select=action)],
            initial_form_values={"host": "db"},
        )
        await prompt.select(1)
        assert prompt.result.selected_value == "go"
        assert prompt.result.form_values == {"host": "db"}

    async def test_sync_action_supported(self):
        seen = []
        prompt = Prompt([SelectElement(label="Test", value=1, on_select=lambda context: seen.append(context.value))])
        await prompt.select(0)
        assert seen == [1]
        assert prompt.spinners.get(0) is SpinnerState.SUCCEEDED

    async def test_cancel_actions(self):
        async def action(context):
            await asyncio.Event().wait()

        prompt = Prompt([SelectElement(label="Test", on_select=action)])
        task = prompt.select(0)
        await asyncio.sleep(0)
        prompt.cancel_actions()
        with pytest.raises(asyncio.CancelledError):
            await task


class TestCancel:
    def test_cancel_marks_done_without_result(self):
        prompt = _form_prompt()
        prompt.dispatch(CANCEL)
        assert prompt.done
        assert prompt.cancelled
        assert prompt.result is None


def test_listeners_notified_on_dispatch():
    prompt = _form_prompt()
    calls = []
    prompt.subscribe(lambda: calls.append(prompt.cursor))
    prompt.dispatch(DOWN)
    assert calls == [1]
