"""Database connectors and the factory that builds them from a descriptor."""

from __future__ import annotations

import logging

from sqlalchemy.engine import URL

from prisma_introspect.connectors.base import Connector, Introspection
from prisma_introspect.connectors.mongo import MongoConnector
from prisma_introspect.connectors.sql import DEFAULT_CONNECT_TIMEOUT_SECONDS, SQLConnector
from prisma_introspect.credentials import (
    DatabaseCredentials,
    MongoCredentials,
    MySQLCredentials,
    PostgresCredentials,
)
from prisma_introspect.uri import replace_local_docker_host

logger = logging.getLogger(__name__)

__all__ = [
    "Connector",
    "Introspection",
    "MongoConnector",
    "SQLConnector",
    "build_connector",
    "check_connection",
    "connect",
]


def _postgres_connector(credentials: PostgresCredentials, timeout: float) -> SQLConnector:
    url = URL.create(
        "postgresql+asyncpg",
        username=credentials.user,
        password=credentials.password,
        host=replace_local_docker_host(credentials.host),
        port=credentials.port,
        database=credentials.database,
    )
    connect_args: dict[str, object] = {"timeout": timeout}
    if credentials.ssl:
        connect_args["ssl"] = "require"
    return SQLConnector(url, credentials.database_type, timeout=timeout, connect_args=connect_args)


def _mysql_connector(credentials: MySQLCredentials, timeout: float) -> SQLConnector:
    url = URL.create(
        "mysql+aiomysql",
        username=credentials.user,
        password=credentials.password,
        host=replace_local_docker_host(credentials.host),
        port=credentials.port,
        database=credentials.database,
    )
    return SQLConnector(
        url,
        credentials.database_type,
        timeout=timeout,
        connect_args={"connect_timeout": int(timeout)},
    )


def build_connector(
    credentials: DatabaseCredentials,
    timeout: float = DEFAULT_CONNECT_TIMEOUT_SECONDS,
) -> Connector:
    """Create the connector matching *credentials* without connecting."""
    if isinstance(credentials, PostgresCredentials):
        return _postgres_connector(credentials, timeout)
    if isinstance(credentials, MySQLCredentials):
        return _mysql_connector(credentials, timeout)
    if isinstance(credentials, MongoCredentials):
        return MongoConnector(credentials.uri, timeout=timeout)
    raise TypeError(f"Unsupported credentials: {type(credentials).__name__}")


async def connect(
    credentials: DatabaseCredentials,
    timeout: float = DEFAULT_CONNECT_TIMEOUT_SECONDS,
) -> Connector:
    """Build the connector for *credentials* and verify the server is reachable.

    Raises:
        ConnectionFailedError: If the server cannot be reached. The
            connector is released before raising.
    """
    connector = build_connector(credentials, timeout)
    try:
        await connector.connect()
    except BaseException:
        await connector.disconnect()
        raise
    logger.debug("Connected %s connector", credentials.database_type.value)
    return connector


async def check_connection(
    credentials: DatabaseCredentials,
    timeout: float = DEFAULT_CONNECT_TIMEOUT_SECONDS,
) -> None:
    """Open and immediately close a connection for *credentials*."""
    connector = await connect(credentials, timeout)
    await connector.disconnect()
