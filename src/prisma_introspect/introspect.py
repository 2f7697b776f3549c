"""Introspection flow: connect, pick the schema, introspect and write the datamodel."""

from __future__ import annotations

import functools
import logging
import math
import time
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from prisma_introspect.connectors import Connector, check_connection, connect
from prisma_introspect.credentials import DatabaseCredentials, DatabaseType
from prisma_introspect.datamodel import render_datamodel
from prisma_introspect.exceptions import EmptyIntrospectionError, MissingSchemaNameError, SchemaNotFoundError
from prisma_introspect.prompt.terminal import KeySource
from prisma_introspect.settings import Settings
from prisma_introspect.wizard import run_wizard, select_schema

logger = logging.getLogger(__name__)


@dataclass
class IntrospectionResult:
    """Rendered datamodel of one introspected schema."""

    sdl: str
    num_tables: int
    database_type: DatabaseType
    schema_name: str


def pretty_time(milliseconds: float) -> str:
    """Format a duration: ``850ms`` up to one second, ``1.3s`` above."""
    if milliseconds > 1000:
        return f"{math.floor(milliseconds / 100 + 0.5) / 10:.1f}s"
    return f"{int(milliseconds)}ms"


async def get_database_schemas(connector: Connector) -> list[str]:
    schemas = await connector.list_schemas()
    logger.debug("Server reports schemas: %s", ", ".join(schemas))
    return schemas


def assert_schema_exists(name: str, database_type: DatabaseType, schemas: list[str]) -> None:
    """Raise :class:`SchemaNotFoundError` unless *name* is one of *schemas*."""
    if name not in schemas:
        schema_word = "schema" if database_type is DatabaseType.POSTGRES else "database"
        raise SchemaNotFoundError(name, schemas, schema_word=schema_word)


async def introspect_schema(connector: Connector, name: str) -> IntrospectionResult:
    """Introspect *name* and render the datamodel.

    Raises:
        EmptyIntrospectionError: If the schema holds no tables or collections.
    """
    introspection = await connector.introspect(name)
    datamodel = introspection.get_normalized_datamodel()
    num_tables = len(datamodel.types)
    if num_tables == 0:
        raise EmptyIntrospectionError()
    return IntrospectionResult(
        sdl=render_datamodel(datamodel),
        num_tables=num_tables,
        database_type=introspection.database_type,
        schema_name=name,
    )


async def _introspect_with_spinner(
    connector: Connector,
    name: str,
    console: Console,
    *,
    show_progress: bool,
) -> IntrospectionResult:
    if not show_progress:
        return await introspect_schema(connector, name)

    label = f"Introspecting database [bold]{escape(name)}[/bold]"
    started = time.monotonic()
    with console.status(label):
        result = await introspect_schema(connector, name)
    elapsed = (time.monotonic() - started) * 1000
    console.print(f"[green]✔[/green] {label}: [cyan]{pretty_time(elapsed)}[/cyan]")
    return result


async def run_introspection(
    credentials: DatabaseCredentials | None,
    *,
    settings: Settings,
    keys: KeySource,
    console: Console,
    interactive: bool = False,
    sdl: bool = False,
) -> IntrospectionResult:
    """Introspect the database described by *credentials*.

    Without *credentials* the interactive wizard collects them first. The
    schema to introspect is the descriptor's target name; when it has none
    the operator picks one from the server's list, which requires an
    interactive session.

    Raises:
        MissingSchemaNameError: If no schema is known and prompting is not allowed.
        SchemaNotFoundError: If the requested schema does not exist.
        ConnectionFailedError: If the database cannot be reached.
        EmptyIntrospectionError: If the schema holds nothing to introspect.
        PromptCancelledError: If the operator cancels a prompt.
    """
    if credentials is None:
        checker = functools.partial(check_connection, timeout=settings.connect_timeout)
        credentials = await run_wizard(keys, console, checker)
        interactive = True
    elif not credentials.target_name and not interactive:
        raise MissingSchemaNameError()

    connector = await connect(credentials, settings.connect_timeout)
    try:
        schemas = await get_database_schemas(connector)
        name = credentials.target_name
        if name:
            assert_schema_exists(name, credentials.database_type, schemas)
        elif not schemas:
            raise MissingSchemaNameError()
        else:
            name = await select_schema(schemas, keys, console)
        return await _introspect_with_spinner(connector, name, console, show_progress=not sdl)
    finally:
        await connector.disconnect()


def write_datamodel(sdl: str, directory: Path) -> str:
    """Write *sdl* to ``datamodel-<epoch millis>.prisma`` in *directory* and return the file name."""
    file_name = f"datamodel-{int(time.time() * 1000)}.prisma"
    directory.mkdir(parents=True, exist_ok=True)
    (directory / file_name).write_text(sdl, encoding="utf-8")
    logger.debug("Wrote %s", directory / file_name)
    return file_name
