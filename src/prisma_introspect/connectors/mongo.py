"""MongoDB connector using Motor. Infers a datamodel from document samples."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any
from urllib.parse import urlsplit

from bson import Decimal128, ObjectId
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from prisma_introspect.connectors.base import Connector, Introspection
from prisma_introspect.credentials import DatabaseType
from prisma_introspect.datamodel import Datamodel, ModelField, ModelType, ScalarType
from prisma_introspect.exceptions import ConnectionFailedError
from prisma_introspect.uri import ADMIN_DATABASE, has_auth_source, redact_url

logger = logging.getLogger(__name__)

# Map Python types (from sampled documents) to Prisma scalars
_PYTHON_TYPE_MAP: dict[type, ScalarType] = {
    str: ScalarType.STRING,
    int: ScalarType.INT,
    float: ScalarType.FLOAT,
    bool: ScalarType.BOOLEAN,
    datetime: ScalarType.DATETIME,
    dict: ScalarType.JSON,
    ObjectId: ScalarType.ID,
    Decimal128: ScalarType.FLOAT,
}

DEFAULT_SAMPLE_SIZE = 100

_ID_FIELD = "_id"


def _infer_field_type(value: Any) -> ScalarType:
    """Infer a scalar from a Python value; lists report their first item's type."""
    if isinstance(value, list):
        value = next((item for item in value if item is not None), None)
    if value is None:
        return ScalarType.STRING  # Unknown, default to string
    return _PYTHON_TYPE_MAP.get(type(value), ScalarType.STRING)


def _collection_to_pascal(name: str) -> str:
    """Convert a collection name to PascalCase type name."""
    return "".join(part[:1].upper() + part[1:] for part in name.replace("-", "_").split("_") if part)


def _merge_field_info(fields_info: dict[str, dict[str, Any]], doc: dict[str, Any]) -> None:
    """Merge field information from a single document into the accumulated info."""
    for key, value in doc.items():
        if key not in fields_info:
            fields_info[key] = {
                "type": _infer_field_type(value),
                "is_list": isinstance(value, list),
                "nullable": value is None,
                "seen": 1,
            }
        else:
            info = fields_info[key]
            info["seen"] += 1
            if value is None:
                info["nullable"] = True
                continue
            if isinstance(value, list):
                info["is_list"] = True
            # Upgrade type if we see a more specific value
            inferred = _infer_field_type(value)
            if info["type"] == ScalarType.STRING and inferred != ScalarType.STRING:
                info["type"] = inferred


def _field_from_info(name: str, info: dict[str, Any], total_docs: int) -> ModelField:
    if name == _ID_FIELD:
        return ModelField(name="id", type=info["type"].value, db_name=_ID_FIELD, is_required=True, is_id=True)
    return ModelField(
        name=name,
        type=info["type"].value,
        is_list=info["is_list"],
        is_required=not (info["nullable"] or info["seen"] < total_docs),
    )


class MongoConnector(Connector):
    """Introspects MongoDB databases by sampling documents to infer a datamodel."""

    database_type = DatabaseType.MONGO

    def __init__(self, uri: str, *, timeout: float = 30.0, sample_size: int = DEFAULT_SAMPLE_SIZE) -> None:
        self.uri = uri
        self.timeout = timeout
        self.sample_size = sample_size
        options: dict[str, Any] = {"serverSelectionTimeoutMS": int(timeout * 1000)}
        if urlsplit(uri).username and not has_auth_source(uri):
            # Credentials without an authSource authenticate against admin.
            options["authSource"] = ADMIN_DATABASE
        try:
            self._client: AsyncIOMotorClient = AsyncIOMotorClient(uri, **options)  # type: ignore[type-arg]
        except PyMongoError as exc:
            raise ConnectionFailedError(redact_url(str(exc))) from exc

    async def connect(self) -> None:
        try:
            await self._client.admin.command("ping")
        except PyMongoError as exc:
            raise ConnectionFailedError(redact_url(str(exc))) from exc
        logger.debug("Connected to %s", redact_url(self.uri))

    async def list_schemas(self) -> list[str]:
        try:
            return list(await self._client.list_database_names())
        except PyMongoError as exc:
            raise ConnectionFailedError(redact_url(str(exc))) from exc

    async def introspect(self, name: str) -> Introspection:
        db = self._client[name]
        try:
            collection_names: list[str] = await db.list_collection_names()
            # Filter out system collections
            collection_names = [c for c in collection_names if not c.startswith("system.")]

            types: list[ModelType] = []
            for coll_name in sorted(collection_names):
                model = await self._introspect_collection(db, coll_name)
                if model is not None:
                    types.append(model)
        except PyMongoError as exc:
            raise ConnectionFailedError(redact_url(str(exc))) from exc

        logger.debug("Sampled %d collections from %s", len(types), name)
        return Introspection(database_type=self.database_type, datamodel=Datamodel(types=types))

    async def _introspect_collection(self, db: Any, collection_name: str) -> ModelType | None:
        """Sample documents from a collection and infer its type."""
        collection = db[collection_name]
        cursor = collection.find().limit(self.sample_size)
        docs = await cursor.to_list(length=self.sample_size)

        if not docs:
            return None

        total_docs = len(docs)
        fields_info: dict[str, dict[str, Any]] = {}
        for doc in docs:
            _merge_field_info(fields_info, doc)

        fields = [_field_from_info(field_name, info, total_docs) for field_name, info in fields_info.items()]
        # Sort fields with the id first, then alphabetical
        fields.sort(key=lambda f: (not f.is_id, f.name))

        return ModelType(
            name=_collection_to_pascal(collection_name),
            db_name=collection_name,
            fields=fields,
        )

    async def disconnect(self) -> None:
        self._client.close()
