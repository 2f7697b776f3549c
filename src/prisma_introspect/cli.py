"""Typer entry point for the prisma-introspect CLI."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import typer
from rich.console import Console

from prisma_introspect.exceptions import IntrospectError
from prisma_introspect.flags import resolve_flag_credentials
from prisma_introspect.introspect import IntrospectionResult, run_introspection, write_datamodel
from prisma_introspect.project import ProjectDefinition
from prisma_introspect.prompt.terminal import TerminalKeys
from prisma_introspect.settings import Settings, load_settings
from prisma_introspect.uri import redact_url

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="prisma-introspect",
    help="Introspect database schema(s) of service.",
    context_settings={"help_option_names": ["-h", "--help"]},
    add_completion=False,
)


class CredentialRedactFilter(logging.Filter):
    """Logging filter that scrubs credentials from connection URLs in log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact_url(record.msg)
        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: redact_url(v) if isinstance(v, str) else v for k, v in record.args.items()}
            elif isinstance(record.args, tuple):
                record.args = tuple(redact_url(a) if isinstance(a, str) else a for a in record.args)
        return True


def configure_logging(verbose: bool) -> None:
    """Send package logs to stderr, DEBUG with *verbose* and WARNING otherwise."""
    package_logger = logging.getLogger("prisma_introspect")
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(getattr(handler, "_prisma_introspect", False) for handler in package_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        handler.addFilter(CredentialRedactFilter())
        handler._prisma_introspect = True  # type: ignore[attr-defined]
        package_logger.addHandler(handler)


def _report_written(result: IntrospectionResult, settings: Settings, definition: ProjectDefinition) -> None:
    file_name = write_datamodel(result.sdl, settings.definition_dir)
    typer.echo(f"Created datamodel definition based on {result.num_tables} database tables.")
    typer.echo(
        f"{typer.style('Created 1 new file:', bold=True)}    "
        "GraphQL SDL-based datamodel (derived from existing database)\n\n"
        f"  {typer.style(file_name, fg='cyan')}\n"
    )
    if definition.exists and not definition.has_datamodel:
        definition.add_datamodel(file_name)
        entry = typer.style(f"datamodel: {file_name}", bold=True)
        typer.echo(f"Added {entry} to {definition.path.name}")


@app.command()
def introspect(
    pg_host: str | None = typer.Option(None, "--pg-host", help="Name of the Postgres host."),
    pg_port: str | None = typer.Option(None, "--pg-port", help="The Postgres port. Default: 5432"),
    pg_user: str | None = typer.Option(None, "--pg-user", help="The Postgres user."),
    pg_password: str | None = typer.Option(None, "--pg-password", help="The Postgres password."),
    pg_db: str | None = typer.Option(None, "--pg-db", help="The Postgres database."),
    pg_ssl: bool = typer.Option(False, "--pg-ssl", help="Enable ssl for postgres."),
    pg_schema: str | None = typer.Option(None, "--pg-schema", help="Name of the Postgres schema."),
    mysql_host: str | None = typer.Option(None, "--mysql-host", help="Name of the MySQL host."),
    mysql_port: str | None = typer.Option(None, "--mysql-port", help="The MySQL port. Default: 3306"),
    mysql_user: str | None = typer.Option(None, "--mysql-user", help="The MySQL user."),
    mysql_password: str | None = typer.Option(None, "--mysql-password", help="The MySQL password."),
    mysql_db: str | None = typer.Option(None, "--mysql-db", help="The MySQL database."),
    mongo_uri: str | None = typer.Option(None, "--mongo-uri", help="Mongo connection string."),
    mongo_db: str | None = typer.Option(None, "--mongo-db", help="Mongo database."),
    interactive: bool = typer.Option(False, "--interactive", "-i", help="Interactive mode."),
    sdl: bool = typer.Option(
        False,
        "--sdl",
        help="Omit any CLI output and just print the resulting datamodel. Useful for scripting.",
    ),
    project: Path | None = typer.Option(None, "--project", "-p", help="Path to Prisma definition file."),
    env_file: Path | None = typer.Option(None, "--env-file", "-e", help="Path to .env file to inject env vars."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr."),
) -> None:
    """Introspect a Postgres, MySQL or MongoDB database and write a Prisma datamodel.

    Connection flags of exactly one database family may be given. Without
    any, an interactive wizard asks for the connection details.

    Examples:

        prisma-introspect --pg-host localhost --pg-user prisma --pg-password secret --pg-db app --pg-schema public

        prisma-introspect --mongo-uri mongodb://localhost:27017/app --sdl
    """
    configure_logging(verbose)
    flags = {
        "--pg-host": pg_host,
        "--pg-port": pg_port,
        "--pg-user": pg_user,
        "--pg-password": pg_password,
        "--pg-db": pg_db,
        "--pg-ssl": pg_ssl or None,
        "--pg-schema": pg_schema,
        "--mysql-host": mysql_host,
        "--mysql-port": mysql_port,
        "--mysql-user": mysql_user,
        "--mysql-password": mysql_password,
        "--mysql-db": mysql_db,
        "--mongo-uri": mongo_uri,
        "--mongo-db": mongo_db,
    }

    # Keep stdout clean for the datamodel when scripting with --sdl.
    console = Console(stderr=sdl)
    keys = TerminalKeys()
    settings: Settings | None = None
    try:
        settings = load_settings(project, env_file)
        definition = ProjectDefinition.load(settings.definition_path)
        credentials = resolve_flag_credentials(flags)
        result = asyncio.run(
            run_introspection(
                credentials,
                settings=settings,
                keys=keys,
                console=console,
                interactive=interactive,
                sdl=sdl,
            )
        )
        if sdl:
            typer.echo(result.sdl, nl=False)
        else:
            _report_written(result, settings, definition)
    except (IntrospectError, OSError, ValueError) as exc:
        if settings is not None and settings.is_dev:
            logger.exception("Introspection failed")
        typer.echo(typer.style(f"Error: {exc}", fg="red", bold=True), err=True)
        raise typer.Exit(code=1) from exc
    finally:
        keys.close()


def main() -> None:
    app()
