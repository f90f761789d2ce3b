"""
MongoDB access for the intake collections.

One MongoStore is created at startup, kept on app.state and handed to
route handlers through the get_store dependency.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Request
from pymongo import DESCENDING, MongoClient
from pymongo.errors import PyMongoError

from config import Settings
from errors import PersistenceError, RecordNotFound

logger = logging.getLogger("intake.database")

NEWEST_FIRST = [("createdAt", DESCENDING), ("_id", DESCENDING)]


class MongoStore:
    def __init__(self, client: Optional[MongoClient], database_name: str):
        self.client = client
        self.db = client[database_name] if client is not None else None

    @classmethod
    def connect(cls, settings: Settings) -> "MongoStore":
        if not settings.database_url:
            logger.error("DATABASE_URL / MONGO_URI environment variable is NOT set!")
            return cls(None, settings.database_name)

        logger.info("Database connection string is set.")
        client = MongoClient(settings.database_url, tz_aware=True)
        logger.info("MongoDB client created for database %r", settings.database_name)
        return cls(client, settings.database_name)

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
            logger.info("MongoDB client closed")
        self.client = None
        self.db = None

    def _collection(self, collection_name: str):
        if self.db is None:
            raise PersistenceError(
                "Database not available. Check DATABASE_URL and DATABASE_NAME environment variables."
            )
        return self.db[collection_name]

    def create_document(
        self,
        collection_name: str,
        data: Dict[str, Any],
        timestamps: Iterable[str] = ("createdAt",),
    ) -> str:
        """Insert one document and return its id as a string.

        Every field named in ``timestamps`` is set to the insert time,
        overwriting anything the caller supplied.
        """
        collection = self._collection(collection_name)
        data_dict = dict(data)
        data_dict.pop("_id", None)

        now = datetime.now(timezone.utc)
        for field in timestamps:
            data_dict[field] = now

        try:
            result = collection.insert_one(data_dict)
        except PyMongoError as exc:
            raise PersistenceError(f"insert into {collection_name} failed: {exc}") from exc
        return str(result.inserted_id)

    def get_documents(
        self,
        collection_name: str,
        projection: Optional[Dict[str, Any]] = None,
    ) -> List[dict]:
        """Return every document in the collection, newest first."""
        collection = self._collection(collection_name)
        try:
            return list(collection.find({}, projection).sort(NEWEST_FIRST))
        except PyMongoError as exc:
            raise PersistenceError(f"query on {collection_name} failed: {exc}") from exc

    def get_document(
        self,
        collection_name: str,
        document_id: str,
        projection: Optional[Dict[str, Any]] = None,
    ) -> dict:
        collection = self._collection(collection_name)
        try:
            oid = ObjectId(document_id)
        except (InvalidId, TypeError) as exc:
            raise RecordNotFound(f"{document_id!r} is not a valid id") from exc

        try:
            doc = collection.find_one({"_id": oid}, projection)
        except PyMongoError as exc:
            raise PersistenceError(f"lookup in {collection_name} failed: {exc}") from exc
        if doc is None:
            raise RecordNotFound(f"no document {document_id} in {collection_name}")
        return doc

    def ping(self) -> Dict[str, Any]:
        """Database name and up to ten collection names, for diagnostics."""
        if self.db is None:
            raise PersistenceError("Database not available.")
        try:
            collections = self.db.list_collection_names()
        except PyMongoError as exc:
            raise PersistenceError(str(exc)) from exc
        return {"name": self.db.name, "collections": collections[:10]}


def get_store(request: Request) -> MongoStore:
    return request.app.state.store
