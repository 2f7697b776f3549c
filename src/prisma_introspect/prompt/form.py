"""Form state shared by the text inputs and checkboxes of a prompt."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Union

FormValue = Union[str, bool]


class FormState:
    """Identifier to value mapping, seeded from a previous step when given."""

    def __init__(self, initial: Mapping[str, FormValue] | None = None) -> None:
        self._values: dict[str, FormValue] = dict(initial or {})

    def get(self, identifier: str, default: FormValue | None = None) -> FormValue | None:
        return self._values.get(identifier, default)

    def set(self, identifier: str, value: FormValue) -> None:
        self._values[identifier] = value

    def text(self, identifier: str) -> str:
        value = self._values.get(identifier)
        return value if isinstance(value, str) else ""

    def checked(self, identifier: str) -> bool:
        return self._values.get(identifier) is True

    def values(self) -> dict[str, FormValue]:
        """A copy of the accumulated values."""
        return dict(self._values)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._values

    def __repr__(self) -> str:
        return f"FormState({self._values!r})"
