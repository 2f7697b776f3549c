"""Normalized connection descriptors, one model per database family."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from prisma_introspect.exceptions import InvalidPortError

MIN_PORT = 1
MAX_PORT = 65535


class DatabaseType(str, Enum):
    """Database family a descriptor belongs to."""

    POSTGRES = "postgres"
    MYSQL = "mysql"
    MONGO = "mongo"


class PostgresCredentials(BaseModel):
    """Connection parameters for a Postgres database."""

    type: Literal["postgres"] = "postgres"
    host: str = Field(min_length=1)
    user: str = Field(min_length=1)
    password: str
    database: str = Field(min_length=1)
    port: int | None = Field(default=None, description="Left unset so the connector applies its own default.")
    schema_name: str | None = Field(default=None, alias="schema", description="Postgres schema to introspect.")
    ssl: bool | None = None

    model_config = {"extra": "forbid", "frozen": True, "populate_by_name": True}

    @property
    def database_type(self) -> DatabaseType:
        return DatabaseType(self.type)

    @property
    def target_name(self) -> str | None:
        return self.schema_name


class MySQLCredentials(BaseModel):
    """Connection parameters for a MySQL (or MariaDB) database."""

    type: Literal["mysql"] = "mysql"
    host: str = Field(min_length=1)
    user: str = Field(min_length=1)
    password: str
    database: str | None = None
    port: int | None = None

    model_config = {"extra": "forbid", "frozen": True}

    @property
    def database_type(self) -> DatabaseType:
        return DatabaseType(self.type)

    @property
    def target_name(self) -> str | None:
        return self.database


class MongoCredentials(BaseModel):
    """Connection parameters for a MongoDB deployment."""

    type: Literal["mongo"] = "mongo"
    uri: str = Field(min_length=1)
    database: str = Field(min_length=1)

    model_config = {"extra": "forbid", "frozen": True}

    @property
    def database_type(self) -> DatabaseType:
        return DatabaseType(self.type)

    @property
    def target_name(self) -> str | None:
        return self.database


DatabaseCredentials = Annotated[
    Union[PostgresCredentials, MySQLCredentials, MongoCredentials],
    Field(discriminator="type"),
]

_credentials_adapter: TypeAdapter[DatabaseCredentials] = TypeAdapter(DatabaseCredentials)


def parse_credentials(data: dict[str, Any]) -> PostgresCredentials | MySQLCredentials | MongoCredentials:
    """Validate a plain mapping (with a ``type`` key) into the matching descriptor.

    Raises:
        pydantic.ValidationError: If the mapping mixes families or misses fields.
    """
    family = data.get("type")
    if isinstance(family, DatabaseType):
        data = {**data, "type": family.value}
    return _credentials_adapter.validate_python(data)


def parse_port(value: str | int | None) -> int | None:
    """Parse an optional port value; empty values stay unset.

    Raises:
        InvalidPortError: If *value* is not an integer between 1 and 65535.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise InvalidPortError(value)
    if isinstance(value, int):
        port = value
    else:
        try:
            port = int(value.strip(), 10)
        except ValueError:
            raise InvalidPortError(value) from None
    if not MIN_PORT <= port <= MAX_PORT:
        raise InvalidPortError(value)
    return port
