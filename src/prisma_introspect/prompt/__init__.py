"""Keypress-driven form engine used by the interactive wizard."""

from prisma_introspect.prompt.cursor import first_focusable, move_down, move_up
from prisma_introspect.prompt.elements import (
    CheckboxElement,
    Element,
    ElementKind,
    SelectContext,
    SelectElement,
    SeparatorElement,
    Style,
    TextInputElement,
    element_kind,
)
from prisma_introspect.prompt.form import FormState
from prisma_introspect.prompt.keys import ActionKey, KeyEvent, decode_key
from prisma_introspect.prompt.prompt import Prompt, PromptResult
from prisma_introspect.prompt.spinners import SpinnerState, SpinnerTracker

__all__ = [
    "ActionKey",
    "CheckboxElement",
    "Element",
    "ElementKind",
    "FormState",
    "KeyEvent",
    "Prompt",
    "PromptResult",
    "SelectContext",
    "SelectElement",
    "SeparatorElement",
    "SpinnerState",
    "SpinnerTracker",
    "Style",
    "TextInputElement",
    "decode_key",
    "element_kind",
    "first_focusable",
    "move_down",
    "move_up",
]
