"""Tests for the connector factory and connection helpers."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.engine import URL

from prisma_introspect.connectors import build_connector, check_connection, connect
from prisma_introspect.credentials import DatabaseType, MongoCredentials, MySQLCredentials, PostgresCredentials
from prisma_introspect.exceptions import ConnectionFailedError


def _postgres(**overrides) -> PostgresCredentials:
    data = {"host": "host.docker.internal", "user": "prisma", "password": "secret", "database": "app"}
    data.update(overrides)
    return PostgresCredentials(**data)


@patch("prisma_introspect.connectors.SQLConnector")
class TestBuildSQLConnector:
    def test_postgres_url(self, mock_sql_cls):
        build_connector(_postgres(port=5433), timeout=5)
        url, database_type = mock_sql_cls.call_args.args
        assert isinstance(url, URL)
        assert url.drivername == "postgresql+asyncpg"
        assert url.host == "localhost"
        assert url.port == 5433
        assert url.username == "prisma"
        assert url.database == "app"
        assert database_type is DatabaseType.POSTGRES
        assert mock_sql_cls.call_args.kwargs["timeout"] == 5
        assert mock_sql_cls.call_args.kwargs["connect_args"] == {"timeout": 5}

    def test_postgres_ssl(self, mock_sql_cls):
        build_connector(_postgres(ssl=True))
        assert mock_sql_cls.call_args.kwargs["connect_args"]["ssl"] == "require"

    def test_non_docker_host_kept(self, mock_sql_cls):
        build_connector(_postgres(host="db.example.com"))
        url = mock_sql_cls.call_args.args[0]
        assert url.host == "db.example.com"

    def test_mysql_url(self, mock_sql_cls):
        build_connector(MySQLCredentials(host="localhost", user="root", password="pw"), timeout=12.5)
        url, database_type = mock_sql_cls.call_args.args
        assert url.drivername == "mysql+aiomysql"
        assert url.database is None
        assert url.port is None
        assert database_type is DatabaseType.MYSQL
        assert mock_sql_cls.call_args.kwargs["connect_args"] == {"connect_timeout": 12}


class TestBuildMongoConnector:
    @patch("prisma_introspect.connectors.MongoConnector")
    def test_mongo_uses_uri(self, mock_mongo_cls):
        build_connector(MongoCredentials(uri="mongodb://localhost:27017/app", database="app"), timeout=3)
        mock_mongo_cls.assert_called_once_with("mongodb://localhost:27017/app", timeout=3)

    def test_unknown_credentials(self):
        with pytest.raises(TypeError, match="Unsupported credentials"):
            build_connector(object())  # type: ignore[arg-type]


def _fake_connector(*, fails: bool = False) -> MagicMock:
    connector = MagicMock()
    connector.connect = AsyncMock(side_effect=ConnectionFailedError("refused") if fails else None)
    connector.disconnect = AsyncMock()
    return connector


class TestConnect:
    async def test_returns_connected_connector(self):
        fake = _fake_connector()
        with patch("prisma_introspect.connectors.build_connector", return_value=fake):
            connector = await connect(_postgres())
        assert connector is fake
        fake.connect.assert_awaited_once()
        fake.disconnect.assert_not_awaited()

    async def test_failure_disconnects(self):
        fake = _fake_connector(fails=True)
        with patch("prisma_introspect.connectors.build_connector", return_value=fake):
            with pytest.raises(ConnectionFailedError, match="refused"):
                await connect(_postgres())
        fake.disconnect.assert_awaited_once()

    async def test_check_connection_closes(self):
        fake = _fake_connector()
        with patch("prisma_introspect.connectors.build_connector", return_value=fake) as mock_build:
            await check_connection(_postgres(), timeout=2)
        mock_build.assert_called_once_with(_postgres(), 2)
        fake.connect.assert_awaited_once()
        fake.disconnect.assert_awaited_once()
