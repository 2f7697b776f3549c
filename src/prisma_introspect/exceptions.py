"""Domain exceptions for credential resolution and introspection.

Every error an operator can trigger (bad flags, unreachable database,
unknown schema) is raised as one of these so that the CLI can catch a single
base class and print a clean message.
"""

from __future__ import annotations


class IntrospectError(Exception):
    """Base exception for all prisma-introspect errors."""


class MutualExclusionError(IntrospectError):
    """Raised when flags from more than one database family are provided."""

    def __init__(self, families: tuple[str, ...] = ("MySQL", "Postgres")) -> None:
        self.families = families
        super().__init__(
            f"You can't provide both {' and '.join(families)} connection flags. Please provide only one of them."
        )


class IncompleteGroupError(IntrospectError):
    """Raised when some, but not all, required flags of a family are provided.

    Attributes:
        prefix: The flag prefix of the family (``"pg"`` or ``"mysql"``).
        missing: The missing flag names, in required-group order.
    """

    def __init__(self, prefix: str, missing: list[str]) -> None:
        self.prefix = prefix
        self.missing = missing
        super().__init__(
            f"If you provide one of the {prefix}- arguments, you need to provide all of them. "
            f"The arguments {', '.join(missing)} are missing."
        )


class InvalidPortError(IntrospectError):
    """Raised when a port value is not an integer."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Invalid port {value!r}. The port must be an integer between 1 and 65535.")


class MissingDatabaseError(IntrospectError):
    """Raised when a Mongo URI has no database path and none was given explicitly."""

    def __init__(self) -> None:
        super().__init__(
            "Please provide a Mongo database in your connection string.\n"
            "Read more here https://docs.mongodb.com/manual/reference/connection-string/"
        )


class MissingSchemaNameError(IntrospectError):
    """Raised when no schema/database name is known and no prompt may be shown."""

    def __init__(self) -> None:
        super().__init__("Please provide a database name")


class SchemaNotFoundError(IntrospectError):
    """Raised when the requested schema is not among the schemas the database reports."""

    def __init__(self, name: str, available: list[str], *, schema_word: str = "database") -> None:
        self.name = name
        self.available = available
        super().__init__(
            f'The provided {schema_word} "{name}" does not exist. '
            f"The following are available: {', '.join(available)}"
        )


class EmptyIntrospectionError(IntrospectError):
    """Raised when introspection finds no tables or collections."""

    def __init__(self) -> None:
        super().__init__("The provided database doesn't contain any tables. Please provide another database.")


class ConnectionFailedError(IntrospectError):
    """Raised when a connector cannot reach the database."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(f"Could not connect to database. {detail}".rstrip())


class PromptCancelledError(IntrospectError):
    """Raised when the operator aborts an interactive prompt."""

    def __init__(self) -> None:
        super().__init__("Introspection cancelled.")


class InvalidCredentialsError(IntrospectError):
    """Raised when interactively entered credentials are incomplete or malformed."""

    def __init__(self, fields: list[str]) -> None:
        self.fields = fields
        super().__init__(f"Please fill in: {', '.join(fields)}")
