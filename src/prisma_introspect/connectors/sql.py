"""SQL connector using SQLAlchemy's asyncio engine (Postgres/MySQL/SQLite)."""

from __future__ import annotations

import asyncio
import logging
import re
from collections import Counter
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from sqlalchemy import inspect, text
from sqlalchemy.engine import URL, Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, create_async_engine

from prisma_introspect.connectors.base import Connector, Introspection
from prisma_introspect.credentials import DatabaseType
from prisma_introspect.datamodel import Datamodel, ModelField, ModelType, ScalarType
from prisma_introspect.exceptions import ConnectionFailedError
from prisma_introspect.uri import redact_url

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Default connection timeout in seconds to prevent indefinite hangs on
# unreachable hosts.
DEFAULT_CONNECT_TIMEOUT_SECONDS = 30.0

# Schemas every server reports that never hold user tables.
_SYSTEM_SCHEMAS = frozenset({"information_schema", "mysql", "performance_schema", "sys"})

# Map SQLAlchemy type names to Prisma scalars
_SQL_TYPE_MAP: dict[str, ScalarType] = {
    "INTEGER": ScalarType.INT,
    "SMALLINT": ScalarType.INT,
    "BIGINT": ScalarType.INT,
    "MEDIUMINT": ScalarType.INT,
    "TINYINT": ScalarType.INT,
    "FLOAT": ScalarType.FLOAT,
    "REAL": ScalarType.FLOAT,
    "DOUBLE": ScalarType.FLOAT,
    "DOUBLE_PRECISION": ScalarType.FLOAT,
    "NUMERIC": ScalarType.FLOAT,
    "DECIMAL": ScalarType.FLOAT,
    "VARCHAR": ScalarType.STRING,
    "NVARCHAR": ScalarType.STRING,
    "CHAR": ScalarType.STRING,
    "TEXT": ScalarType.STRING,
    "MEDIUMTEXT": ScalarType.STRING,
    "LONGTEXT": ScalarType.STRING,
    "ENUM": ScalarType.STRING,
    "UUID": ScalarType.STRING,
    "BOOLEAN": ScalarType.BOOLEAN,
    "BIT": ScalarType.BOOLEAN,
    "DATETIME": ScalarType.DATETIME,
    "TIMESTAMP": ScalarType.DATETIME,
    "DATE": ScalarType.DATETIME,
    "JSON": ScalarType.JSON,
    "JSONB": ScalarType.JSON,
}

_CAST_RE = re.compile(r"^(.*?)::[\w\s\".\[\]]+$")
_NUMBER_RE = re.compile(r"-?\d+(\.\d+)?")
_FK_SUFFIX_RE = re.compile(r"_?[iI][dD]$")


def _resolve_field_type(sa_type: object) -> ScalarType:
    """Map a SQLAlchemy column type to a Prisma scalar."""
    type_str = str(sa_type).upper()
    # MySQL stores booleans as TINYINT(1).
    if type_str == "TINYINT(1)":
        return ScalarType.BOOLEAN
    type_name = type(sa_type).__name__.upper()
    if type_name in _SQL_TYPE_MAP:
        return _SQL_TYPE_MAP[type_name]
    return _SQL_TYPE_MAP.get(type_str.split("(")[0], ScalarType.STRING)


def _table_to_pascal(name: str) -> str:
    """Convert a table name like 'user_accounts' to 'UserAccounts'."""
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


def _lower_first(name: str) -> str:
    return name[:1].lower() + name[1:]


def _normalize_default(raw: Any, field_type: ScalarType) -> str | None:
    """Reduce a reflected server default to a literal, or ``None`` if it has none.

    Sequences, function calls and keywords such as ``CURRENT_TIMESTAMP``
    have no literal form and are dropped.
    """
    if raw is None:
        return None
    value = str(raw).strip()
    cast = _CAST_RE.match(value)
    if cast:
        value = cast.group(1).strip()
    while value.startswith("(") and value.endswith(")"):
        value = value[1:-1].strip()
    if len(value) >= 2 and value[0] == value[-1] == "'":
        value = value[1:-1].replace("''", "'")
    elif field_type not in (ScalarType.BOOLEAN, ScalarType.INT, ScalarType.FLOAT):
        return None

    if field_type is ScalarType.BOOLEAN:
        lowered = value.lower()
        if lowered in ("true", "1", "b'1'"):
            return "true"
        if lowered in ("false", "0", "b'0'"):
            return "false"
        return None
    if field_type in (ScalarType.INT, ScalarType.FLOAT):
        return value if _NUMBER_RE.fullmatch(value) else None
    return value


@dataclass
class TableInfo:
    """Reflected metadata of one table."""

    name: str
    columns: list[dict[str, Any]]
    primary_key: list[str] = field(default_factory=list)
    unique_columns: set[str] = field(default_factory=set)
    foreign_keys: list[dict[str, Any]] = field(default_factory=list)


def _read_tables(sync_conn: Connection, schema: str) -> list[TableInfo]:
    inspector = inspect(sync_conn)
    tables: list[TableInfo] = []
    for table_name in inspector.get_table_names(schema=schema):
        unique_columns: set[str] = set()
        for uc in inspector.get_unique_constraints(table_name, schema=schema):
            if len(uc.get("column_names", [])) == 1:
                unique_columns.add(uc["column_names"][0])
        for idx in inspector.get_indexes(table_name, schema=schema):
            names = idx.get("column_names", [])
            if idx.get("unique") and len(names) == 1 and names[0] is not None:
                unique_columns.add(names[0])

        pk_constraint = inspector.get_pk_constraint(table_name, schema=schema)
        tables.append(
            TableInfo(
                name=table_name,
                columns=inspector.get_columns(table_name, schema=schema),
                primary_key=list(pk_constraint.get("constrained_columns") or []),
                unique_columns=unique_columns,
                foreign_keys=inspector.get_foreign_keys(table_name, schema=schema),
            )
        )
    return tables


def _scalar_field(column: dict[str, Any], *, is_id: bool, is_unique: bool) -> ModelField:
    sa_type = column["type"]
    item_type = getattr(sa_type, "item_type", None)
    is_list = type(sa_type).__name__.upper() == "ARRAY" and item_type is not None
    field_type = _resolve_field_type(item_type if is_list else sa_type)
    return ModelField(
        name=column["name"],
        type=field_type.value,
        is_list=is_list,
        is_required=not column.get("nullable", True),
        is_id=is_id,
        is_unique=is_unique,
        default=None if is_list else _normalize_default(column.get("default"), field_type),
    )


def _relation_field_name(column: str, target_type: str, taken: set[str]) -> str:
    name = _FK_SUFFIX_RE.sub("", column) or _lower_first(target_type)
    if name in taken:
        return column
    return name


def build_datamodel(tables: list[TableInfo]) -> Datamodel:
    """Turn reflected tables into a datamodel.

    Single-column foreign keys become relation fields on the referencing
    type plus a list field on the referenced one. Composite primary and
    foreign keys are kept as plain scalar columns.
    """
    type_names = {table.name: _table_to_pascal(table.name) for table in tables}
    types = {table.name: ModelType(name=type_names[table.name], db_name=table.name) for table in tables}

    relations: list[tuple[TableInfo, str, str]] = []
    for table in tables:
        for fk in table.foreign_keys:
            columns = fk.get("constrained_columns") or []
            referred_table = fk.get("referred_table") or ""
            if len(columns) == 1 and referred_table in type_names:
                relations.append((table, columns[0], referred_table))
    pair_counts = Counter((table.name, target) for table, _, target in relations)
    relation_names: dict[tuple[str, str], str | None] = {}
    for table, column, target in relations:
        ambiguous = pair_counts[(table.name, target)] > 1
        relation_names[(table.name, column)] = (
            f"{type_names[table.name]}{_table_to_pascal(column)}" if ambiguous else None
        )

    for table in tables:
        single_pk = table.primary_key[0] if len(table.primary_key) == 1 else None
        column_names = {column["name"] for column in table.columns}
        fk_targets = {column: target for source, column, target in relations if source is table}
        model = types[table.name]
        for column in table.columns:
            name = column["name"]
            if name in fk_targets:
                target_type = type_names[fk_targets[name]]
                model.fields.append(
                    ModelField(
                        name=_relation_field_name(name, target_type, column_names - {name}),
                        type=target_type,
                        db_name=name,
                        is_required=not column.get("nullable", True),
                        is_unique=name in table.unique_columns,
                        relation_name=relation_names[(table.name, name)],
                    )
                )
                continue
            model.fields.append(
                _scalar_field(column, is_id=name == single_pk, is_unique=name in table.unique_columns)
            )

    for table, column, target in relations:
        target_model = types[target]
        taken = {f.name for f in target_model.fields}
        back_name = _lower_first(type_names[table.name])
        if back_name in taken:
            back_name = f"{back_name}By{_table_to_pascal(column)}"
        target_model.fields.append(
            ModelField(
                name=back_name,
                type=type_names[table.name],
                is_list=True,
                relation_name=relation_names[(table.name, column)],
            )
        )

    return Datamodel(types=[types[table.name] for table in tables])


class SQLConnector(Connector):
    """Connects to SQL databases (Postgres, MySQL, SQLite) via SQLAlchemy.

    For Postgres the names returned by :meth:`list_schemas` are schemas of
    the connected database, for MySQL they are databases.
    """

    def __init__(
        self,
        url: str | URL,
        database_type: DatabaseType,
        *,
        timeout: float = DEFAULT_CONNECT_TIMEOUT_SECONDS,
        connect_args: dict[str, Any] | None = None,
    ) -> None:
        self.url = url
        self.database_type = database_type
        self.timeout = timeout
        self._engine = create_async_engine(url, pool_pre_ping=True, connect_args=connect_args or {})

    @property
    def safe_url(self) -> str:
        if isinstance(self.url, URL):
            return self.url.render_as_string(hide_password=True)
        return redact_url(self.url)

    async def _run(self, operation: Callable[[AsyncConnection], Awaitable[T]]) -> T:
        async def _with_connection() -> T:
            async with self._engine.connect() as conn:
                return await operation(conn)

        try:
            return await asyncio.wait_for(_with_connection(), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise ConnectionFailedError(
                f"Connecting to {self.safe_url} timed out after {self.timeout}s. The host may be unreachable."
            ) from None
        except (SQLAlchemyError, OSError) as exc:
            detail = getattr(exc, "orig", None) or exc
            raise ConnectionFailedError(redact_url(str(detail))) from exc

    async def connect(self) -> None:
        await self._run(lambda conn: conn.execute(text("SELECT 1")))
        logger.debug("Connected to %s", self.safe_url)

    async def list_schemas(self) -> list[str]:
        names: list[str] = await self._run(
            lambda conn: conn.run_sync(lambda sync_conn: inspect(sync_conn).get_schema_names())
        )
        return [name for name in names if name not in _SYSTEM_SCHEMAS and not name.startswith("pg_")]

    async def introspect(self, name: str) -> Introspection:
        tables = await self._run(lambda conn: conn.run_sync(_read_tables, name))
        logger.debug("Reflected %d tables from %s", len(tables), name)
        return Introspection(database_type=self.database_type, datamodel=build_datamodel(tables))

    async def disconnect(self) -> None:
        await self._engine.dispose()
