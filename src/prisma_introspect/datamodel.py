"""Normalized datamodel produced by connectors and its Prisma SDL rendering."""

from __future__ import annotations

from enum import Enum

from jinja2 import Environment, PackageLoader, select_autoescape
from pydantic import BaseModel, Field


class ScalarType(str, Enum):
    """Prisma scalar types."""

    ID = "ID"
    STRING = "String"
    INT = "Int"
    FLOAT = "Float"
    BOOLEAN = "Boolean"
    DATETIME = "DateTime"
    JSON = "Json"


# Defaults of these types are rendered as bare literals, everything else is quoted.
_UNQUOTED_TYPES = frozenset({ScalarType.INT.value, ScalarType.FLOAT.value, ScalarType.BOOLEAN.value})


class ModelField(BaseModel):
    """One field of a datamodel type."""

    name: str = Field(min_length=1)
    type: str = Field(min_length=1, description="A ScalarType value or the name of another type.")
    db_name: str | None = Field(default=None, description="Column name when it differs from ``name``.")
    is_list: bool = False
    is_required: bool = False
    is_id: bool = False
    is_unique: bool = False
    default: str | None = None
    relation_name: str | None = None

    model_config = {"extra": "forbid"}

    @property
    def sdl_type(self) -> str:
        if self.is_list:
            return f"[{self.type}]"
        return f"{self.type}!" if self.is_required else self.type

    @property
    def directives(self) -> list[str]:
        result: list[str] = []
        if self.is_id:
            result.append("@id")
        if self.is_unique and not self.is_id:
            result.append("@unique")
        if self.default is not None:
            result.append(f"@default(value: {self._default_literal()})")
        if self.relation_name is not None:
            result.append(f'@relation(name: "{self.relation_name}")')
        if self.db_name is not None and self.db_name != self.name:
            result.append(f'@db(name: "{self.db_name}")')
        return result

    def _default_literal(self) -> str:
        assert self.default is not None
        if self.type in _UNQUOTED_TYPES:
            return self.default
        escaped = self.default.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'


class ModelType(BaseModel):
    """A table or collection."""

    name: str = Field(min_length=1)
    db_name: str | None = None
    fields: list[ModelField] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

    @property
    def directives(self) -> list[str]:
        result: list[str] = []
        if self.db_name is not None and self.db_name != self.name:
            result.append(f'@db(name: "{self.db_name}")')
        return result


class Datamodel(BaseModel):
    """The normalized result of introspecting one database or schema."""

    types: list[ModelType] = Field(default_factory=list)

    model_config = {"extra": "forbid"}


def _get_template_env() -> Environment:
    return Environment(
        loader=PackageLoader("prisma_introspect", "templates"),
        autoescape=select_autoescape([]),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render_datamodel(datamodel: Datamodel) -> str:
    """Render *datamodel* as Prisma SDL."""
    template = _get_template_env().get_template("datamodel.prisma.j2")
    return template.render(types=datamodel.types)
