"""Flag-based credential resolution.

Connection flags come in three families. Postgres and MySQL each have a
required group that must be given completely or not at all, and the two
groups may never be mixed. Mongo is selected by ``--mongo-uri`` alone.

Usage::

    credentials = resolve_flag_credentials({"--pg-host": "localhost", ...})
    if credentials is None:
        ...  # nothing usable on the command line, fall back to the wizard
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from prisma_introspect.credentials import (
    DatabaseCredentials,
    MongoCredentials,
    MySQLCredentials,
    PostgresCredentials,
    parse_port,
)
from prisma_introspect.exceptions import IncompleteGroupError, MutualExclusionError
from prisma_introspect.uri import populate_database, redact_url, sanitize_uri

logger = logging.getLogger(__name__)

POSTGRES_REQUIRED_FLAGS: tuple[str, ...] = ("--pg-host", "--pg-user", "--pg-password", "--pg-db")
MYSQL_REQUIRED_FLAGS: tuple[str, ...] = ("--mysql-host", "--mysql-user", "--mysql-password")
MONGO_URI_FLAG = "--mongo-uri"

# Every connection flag the resolver understands, mapped to its family prefix.
CONNECTION_FLAGS: dict[str, str] = {
    "--pg-host": "pg",
    "--pg-port": "pg",
    "--pg-user": "pg",
    "--pg-password": "pg",
    "--pg-db": "pg",
    "--pg-ssl": "pg",
    "--pg-schema": "pg",
    "--mysql-host": "mysql",
    "--mysql-port": "mysql",
    "--mysql-user": "mysql",
    "--mysql-password": "mysql",
    "--mysql-db": "mysql",
    "--mongo-uri": "mongo",
    "--mongo-db": "mongo",
}


def is_present(value: Any) -> bool:
    """A flag counts as provided when it has a value other than ``None`` or ``""``."""
    return value is not None and value != ""


def _present(flags: Mapping[str, Any], group: Sequence[str]) -> list[str]:
    return [name for name in group if is_present(flags.get(name))]


def _check_group(flags: Mapping[str, Any], group: Sequence[str], prefix: str) -> bool:
    """Return ``True`` when *group* is complete, ``False`` when absent.

    Raises:
        IncompleteGroupError: If only part of the group is present.
    """
    present = _present(flags, group)
    if not present:
        return False
    if len(present) < len(group):
        missing = [name for name in group if name not in present]
        raise IncompleteGroupError(prefix, missing)
    return True


def _optional(flags: Mapping[str, Any], name: str) -> Any:
    value = flags.get(name)
    return value if is_present(value) else None


def resolve_flag_credentials(flags: Mapping[str, Any]) -> DatabaseCredentials | None:
    """Build a descriptor from already-parsed CLI flags.

    Args:
        flags: Flag name (``"--pg-host"``) to value. Absent flags may be
            missing from the mapping or map to ``None``.

    Returns:
        The descriptor of exactly one family, or ``None`` when no family's
        flags are usable and the caller should prompt interactively.

    Raises:
        MutualExclusionError: If Postgres and MySQL flags are both present.
        IncompleteGroupError: If a family's required flags are partially present.
        InvalidPortError: If a port flag is not an integer.
        MissingDatabaseError: If the Mongo URI names no database and ``--mongo-db`` is absent.
    """
    if _present(flags, POSTGRES_REQUIRED_FLAGS) and _present(flags, MYSQL_REQUIRED_FLAGS):
        raise MutualExclusionError()

    if _check_group(flags, POSTGRES_REQUIRED_FLAGS, "pg"):
        logger.debug("Resolved Postgres credentials from flags")
        return PostgresCredentials(
            host=flags["--pg-host"],
            user=flags["--pg-user"],
            password=flags["--pg-password"],
            database=flags["--pg-db"],
            port=parse_port(_optional(flags, "--pg-port")),
            schema=_optional(flags, "--pg-schema"),
            ssl=_optional(flags, "--pg-ssl"),
        )

    if _check_group(flags, MYSQL_REQUIRED_FLAGS, "mysql"):
        logger.debug("Resolved MySQL credentials from flags")
        return MySQLCredentials(
            host=flags["--mysql-host"],
            user=flags["--mysql-user"],
            password=flags["--mysql-password"],
            database=_optional(flags, "--mysql-db"),
            port=parse_port(_optional(flags, "--mysql-port")),
        )

    uri = _optional(flags, MONGO_URI_FLAG)
    if uri is not None:
        database = populate_database(uri, _optional(flags, "--mongo-db"))
        logger.debug("Resolved Mongo credentials from flags for %s", redact_url(uri))
        return MongoCredentials(uri=sanitize_uri(uri), database=database)

    return None
