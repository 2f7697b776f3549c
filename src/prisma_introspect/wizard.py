"""Interactive credential wizard.

Two steps: choose the database family, then fill in its connection fields.
Form values survive going back and forth between the steps, so re-choosing
a family keeps whatever was typed so far.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import ValidationError
from rich.console import Console

from prisma_introspect.credentials import DatabaseCredentials, DatabaseType, parse_credentials, parse_port
from prisma_introspect.exceptions import InvalidCredentialsError
from prisma_introspect.prompt.elements import (
    CheckboxElement,
    Element,
    SelectContext,
    SelectElement,
    SeparatorElement,
    Style,
    TextInputElement,
)
from prisma_introspect.prompt.form import FormValue
from prisma_introspect.prompt.prompt import Prompt, PromptResult
from prisma_introspect.prompt.spinners import SpinnerState
from prisma_introspect.prompt.terminal import KeySource, run_prompt
from prisma_introspect.uri import populate_database, sanitize_uri

logger = logging.getLogger(__name__)

ConnectionCheck = Callable[[DatabaseCredentials], Awaitable[None]]

FAMILY_LABELS: dict[DatabaseType, str] = {
    DatabaseType.POSTGRES: "Postgres",
    DatabaseType.MYSQL: "MySQL",
    DatabaseType.MONGO: "MongoDB",
}

CHOOSE_FAMILY_ELEMENTS: tuple[Element, ...] = (
    SelectElement(label="Postgres", value=DatabaseType.POSTGRES.value, description="PostgreSQL database"),
    SelectElement(
        label="MySQL",
        value=DatabaseType.MYSQL.value,
        description="MySQL compliant databases like MySQL or MariaDB",
    ),
    SelectElement(label="MongoDB", value=DatabaseType.MONGO.value, description="Mongo Database"),
)


class WizardStep(str, Enum):
    CHOOSE_FAMILY = "choose-family"
    CONNECT = "connect"


@dataclass(frozen=True)
class StepBundle:
    """Everything needed to build the prompt of one wizard step."""

    step: WizardStep
    elements: tuple[Element, ...]
    title: str
    with_back_button: bool
    initial_form_values: dict[str, FormValue] = field(default_factory=dict)


def _sql_fields(default_port: str, *, with_schema: bool) -> list[Element]:
    elements: list[Element] = [
        TextInputElement(identifier="host", label="Host:", placeholder="localhost"),
        TextInputElement(identifier="port", label="Port:", placeholder=default_port),
        TextInputElement(identifier="user", label="User:", placeholder="my_db_user"),
        TextInputElement(identifier="password", label="Password:", placeholder="my_db_password", mask="*"),
        TextInputElement(identifier="database", label="Database:", placeholder="my_db_name"),
    ]
    if with_schema:
        elements.append(TextInputElement(identifier="schema", label="Schema:", placeholder="public"))
    return elements


def connect_fields(family: DatabaseType) -> list[Element]:
    """Form fields of the connect step for *family*, without the action rows."""
    if family is DatabaseType.POSTGRES:
        fields = _sql_fields("5432", with_schema=True)
        fields.append(CheckboxElement(identifier="ssl", label="Enable SSL ?", style=Style(margin_top=1)))
        return fields
    if family is DatabaseType.MYSQL:
        return _sql_fields("3306", with_schema=False)
    return [
        TextInputElement(identifier="uri", label="Connection string:", placeholder="mongodb://localhost:27017"),
        TextInputElement(identifier="database", label="Database:", placeholder="my_db_name"),
    ]


def _text(values: Mapping[str, Any], key: str) -> str | None:
    value = values.get(key)
    if isinstance(value, str):
        value = value.strip()
    return value or None


def credentials_from_form(family: DatabaseType, values: Mapping[str, Any]) -> DatabaseCredentials:
    """Finalize accumulated form values into a descriptor of *family*.

    Keys that do not belong to *family* are ignored, so values typed for a
    previously chosen family never leak into the descriptor.

    Raises:
        InvalidCredentialsError: If required fields are empty.
        InvalidPortError: If the port is not an integer.
        MissingDatabaseError: If a Mongo URI names no database and none was entered.
    """
    data: dict[str, Any]
    if family is DatabaseType.MONGO:
        uri = _text(values, "uri")
        if uri is None:
            raise InvalidCredentialsError(["uri"])
        data = {
            "type": family.value,
            "uri": sanitize_uri(uri),
            "database": populate_database(uri, _text(values, "database")),
        }
    else:
        data = {
            "type": family.value,
            "host": _text(values, "host"),
            "user": _text(values, "user"),
            "password": values.get("password") or "",
            "database": _text(values, "database"),
            "port": parse_port(_text(values, "port")),
        }
        if family is DatabaseType.POSTGRES:
            data["schema"] = _text(values, "schema")
            data["ssl"] = values.get("ssl") is True

    try:
        return parse_credentials(data)
    except ValidationError as exc:
        missing = sorted({str(error["loc"][-1]) for error in exc.errors()})
        raise InvalidCredentialsError(missing) from exc


def _connection_action(
    family: DatabaseType,
    check_connection: ConnectionCheck | None,
    *,
    submit: bool,
) -> Callable[[SelectContext], Awaitable[None]]:
    async def action(context: SelectContext) -> None:
        context.start_spinner()
        credentials = credentials_from_form(family, context.form_values)
        if check_connection is not None:
            await check_connection(credentials)
        context.stop_spinner(SpinnerState.SUCCEEDED)
        if submit:
            context.submit_prompt()
        else:
            context.report("Connection successful.")

    return action


class Wizard:
    """Step controller for the interactive credential wizard.

    Usage::

        wizard = Wizard(check_connection=check)
        while True:
            result = await run_prompt(wizard.build_prompt(), keys)
            credentials = wizard.advance(result)
            if credentials is not None:
                break
    """

    def __init__(self, check_connection: ConnectionCheck | None = None) -> None:
        self.check_connection = check_connection
        self.step = WizardStep.CHOOSE_FAMILY
        self.family: DatabaseType | None = None
        self.form_values: dict[str, FormValue] = {}

    def bundle(self) -> StepBundle:
        """Elements, title and seed values of the current step."""
        if self.step is WizardStep.CHOOSE_FAMILY or self.family is None:
            return StepBundle(
                step=WizardStep.CHOOSE_FAMILY,
                elements=CHOOSE_FAMILY_ELEMENTS,
                title="What kind of database do you want to introspect?",
                with_back_button=False,
                initial_form_values=dict(self.form_values),
            )

        elements = connect_fields(self.family)
        elements.extend(
            [
                SeparatorElement(divider_char="-", style=Style(margin_top=1, margin_bottom=1)),
                SelectElement(
                    label="Test",
                    value="test",
                    description="Test the database connection",
                    on_select=_connection_action(self.family, self.check_connection, submit=False),
                ),
                SelectElement(
                    label="Connect",
                    value="connect",
                    description="Start the introspection",
                    on_select=_connection_action(self.family, self.check_connection, submit=True),
                ),
            ]
        )
        return StepBundle(
            step=WizardStep.CONNECT,
            elements=tuple(elements),
            title=f"Enter the {FAMILY_LABELS[self.family]} credentials",
            with_back_button=True,
            initial_form_values=dict(self.form_values),
        )

    def build_prompt(self) -> Prompt:
        bundle = self.bundle()
        return Prompt(
            bundle.elements,
            title=bundle.title,
            with_back_button=bundle.with_back_button,
            initial_form_values=bundle.initial_form_values,
        )

    def advance(self, result: PromptResult) -> DatabaseCredentials | None:
        """Apply a submitted prompt to the wizard.

        Returns the finished descriptor once the connect step is submitted
        without going back, ``None`` while more steps follow.
        """
        self.form_values = {**self.form_values, **result.form_values}

        if self.step is WizardStep.CHOOSE_FAMILY:
            self.family = DatabaseType(result.selected_value)
            self.form_values["type"] = self.family.value
            self.step = WizardStep.CONNECT
            logger.debug("Wizard: chose %s", self.family.value)
            return None

        if result.go_back:
            self.step = WizardStep.CHOOSE_FAMILY
            logger.debug("Wizard: back to family selection")
            return None

        assert self.family is not None
        return credentials_from_form(self.family, self.form_values)


async def run_wizard(
    keys: KeySource,
    console: Console | None = None,
    check_connection: ConnectionCheck | None = None,
) -> DatabaseCredentials:
    """Drive the wizard until the operator submits the connect step.

    Raises:
        PromptCancelledError: If the operator cancels.
    """
    wizard = Wizard(check_connection=check_connection)
    while True:
        result = await run_prompt(wizard.build_prompt(), keys, console)
        credentials = wizard.advance(result)
        if credentials is not None:
            return credentials


async def select_schema(schemas: list[str], keys: KeySource, console: Console | None = None) -> str:
    """Let the operator pick one of *schemas*."""
    elements = [SelectElement(label=name, value=name) for name in schemas]
    prompt = Prompt(elements, title="Please select the schema you want to introspect")
    result = await run_prompt(prompt, keys, console)
    return str(result.selected_value)
