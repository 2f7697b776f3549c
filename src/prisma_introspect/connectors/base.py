"""Abstract base for database connectors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from prisma_introspect.credentials import DatabaseType
from prisma_introspect.datamodel import Datamodel


@dataclass
class Introspection:
    """Result of introspecting one schema (SQL) or database (Mongo)."""

    database_type: DatabaseType
    datamodel: Datamodel

    def get_normalized_datamodel(self) -> Datamodel:
        return self.datamodel


class Connector(ABC):
    """A live connection to one database server.

    Connectors are created connected by :func:`prisma_introspect.connectors.connect`
    and must be released with :meth:`disconnect`.
    """

    database_type: DatabaseType

    @abstractmethod
    async def connect(self) -> None:
        """Verify the server is reachable.

        Raises:
            ConnectionFailedError: If the server cannot be reached.
        """

    @abstractmethod
    async def list_schemas(self) -> list[str]:
        """Names that can be passed to :meth:`introspect`."""

    @abstractmethod
    async def introspect(self, name: str) -> Introspection:
        """Read the tables or collections of *name* into a :class:`Datamodel`."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the connection pool or client."""
