"""Tests for the normalized datamodel and its Prisma rendering."""

import pytest
from pydantic import ValidationError

from prisma_introspect.datamodel import Datamodel, ModelField, ModelType, ScalarType, render_datamodel


def _users() -> ModelType:
    return ModelType(
        name="User",
        db_name="users",
        fields=[
            ModelField(name="id", type="Int", is_required=True, is_id=True),
            ModelField(name="email", type="String", is_required=True, is_unique=True),
            ModelField(name="active", type="Boolean", default="true"),
            ModelField(name="posts", type="Post", is_list=True),
        ],
    )


class TestModelField:
    def test_sdl_type(self):
        assert ModelField(name="a", type="String").sdl_type == "String"
        assert ModelField(name="a", type="String", is_required=True).sdl_type == "String!"
        assert ModelField(name="a", type="Post", is_list=True, is_required=True).sdl_type == "[Post]"

    def test_id_is_not_also_unique(self):
        field = ModelField(name="id", type="ID", is_id=True, is_unique=True)
        assert field.directives == ["@id"]

    def test_default_quoting(self):
        assert ModelField(name="n", type="Int", default="0").directives == ["@default(value: 0)"]
        assert ModelField(name="s", type="String", default='say "hi"').directives == [
            '@default(value: "say \\"hi\\"")'
        ]

    def test_db_name_only_when_different(self):
        assert ModelField(name="author", type="User", db_name="author_id").directives == ['@db(name: "author_id")']
        assert ModelField(name="title", type="String", db_name="title").directives == []

    def test_relation_name(self):
        field = ModelField(name="owner", type="User", relation_name="PostOwner")
        assert field.directives == ['@relation(name: "PostOwner")']

    def test_extra_rejected(self):
        with pytest.raises(ValidationError):
            ModelField(name="a", type="String", nullable=True)


def test_scalar_values():
    assert ScalarType.DATETIME.value == "DateTime"
    assert ScalarType.JSON.value == "Json"


class TestRenderDatamodel:
    def test_single_type(self):
        sdl = render_datamodel(Datamodel(types=[_users()]))
        assert sdl == (
            'type User @db(name: "users") {\n'
            "  id: Int! @id\n"
            "  email: String! @unique\n"
            "  active: Boolean @default(value: true)\n"
            "  posts: [Post]\n"
            "}\n"
        )

    def test_types_separated_by_blank_line(self):
        post = ModelType(name="Post", fields=[ModelField(name="title", type="String", is_required=True)])
        sdl = render_datamodel(Datamodel(types=[_users(), post]))
        assert "}\n\ntype Post {\n  title: String!\n}\n" in sdl
        assert sdl.startswith("type User")

    def test_empty_datamodel(self):
        assert render_datamodel(Datamodel()) == ""
