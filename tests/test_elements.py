"""Tests for the element model."""

import pytest

from prisma_introspect.prompt.elements import (
    CheckboxElement,
    ElementKind,
    SelectElement,
    SeparatorElement,
    TextInputElement,
    back_button,
    element_kind,
    is_checkbox,
    is_select,
    is_separator,
    is_text_input,
    validate_identifiers,
)


class TestElementKind:
    def test_each_variant(self):
        assert element_kind(TextInputElement(identifier="a", label="A")) is ElementKind.TEXT_INPUT
        assert element_kind(CheckboxElement(identifier="b", label="B")) is ElementKind.CHECKBOX
        assert element_kind(SelectElement(label="C")) is ElementKind.SELECT
        assert element_kind(SeparatorElement()) is ElementKind.SEPARATOR

    def test_exactly_one_predicate_holds(self):
        elements = [
            TextInputElement(identifier="a", label="A"),
            CheckboxElement(identifier="b", label="B"),
            SelectElement(label="C"),
            SeparatorElement(),
        ]
        predicates = [is_text_input, is_checkbox, is_select, is_separator]
        for element in elements:
            assert sum(predicate(element) for predicate in predicates) == 1

    def test_unknown_element(self):
        with pytest.raises(TypeError, match="Unknown element type"):
            element_kind("not an element")  # type: ignore[arg-type]


class TestValidateIdentifiers:
    def test_unique_ok(self):
        validate_identifiers(
            [
                TextInputElement(identifier="host", label="Host"),
                CheckboxElement(identifier="ssl", label="SSL"),
                SelectElement(label="Go"),
            ]
        )

    def test_duplicate_across_variants(self):
        with pytest.raises(ValueError, match="host"):
            validate_identifiers(
                [
                    TextInputElement(identifier="host", label="Host"),
                    CheckboxElement(identifier="host", label="Host?"),
                ]
            )


def test_back_button():
    button = back_button()
    assert button.is_back_button
    assert button.label == "Back"
    assert button.on_select is None
    assert button.style.margin_top == 1
