"""
Base repository class providing common document operations.

All entity-specific repositories inherit from this base class.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Generic, Iterator, Optional, TypeVar

from bson import ObjectId
from pydantic import ValidationError as PydanticValidationError
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError
from pymongo.results import InsertOneResult

from hiring_pipeline.core.errors import StorageError
from hiring_pipeline.data.database import get_sync_db
from hiring_pipeline.data.models.base import BaseDocument, utcnow
from hiring_pipeline.utils.logger import get_logger

logger = get_logger(__name__)

# Type variable for document models
T = TypeVar("T", bound=BaseDocument)


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository providing common database operations.

    Subclasses must define the collection name and model class. A
    database handle may be injected (tests pass a mongomock database);
    otherwise the global database manager supplies one lazily.
    """

    @property
    @abstractmethod
    def collection_name(self) -> str:
        """Name of the MongoDB collection."""
        pass

    @property
    @abstractmethod
    def model_class(self) -> type[T]:
        """Pydantic model class for this repository."""
        pass

    def __init__(self, database: Optional[Database] = None) -> None:
        """Initialize repository with an optional database handle."""
        self._database = database

    # -------------------------------------------------------------------------
    # Collection Access
    # -------------------------------------------------------------------------

    def _get_collection(self) -> Collection:
        """Get collection instance."""
        if self._database is None:
            self._database = get_sync_db()
        return self._database[self.collection_name]

    @contextmanager
    def _storage_errors(self, operation: str) -> Iterator[None]:
        """Translate driver failures into StorageError."""
        try:
            yield
        except PyMongoError as e:
            logger.error(f"{self.collection_name}.{operation} failed: {e}")
            raise StorageError(
                f"{operation} on {self.collection_name} failed: {e}",
                original_error=e,
            ) from e

    # -------------------------------------------------------------------------
    # Document Conversion
    # -------------------------------------------------------------------------

    def _to_model(self, document: Optional[dict[str, Any]]) -> Optional[T]:
        """Convert MongoDB document to Pydantic model."""
        if document is None:
            return None
        try:
            return self.model_class.model_validate(document)
        except PydanticValidationError as e:
            raise StorageError(
                f"Corrupt {self.collection_name} document {document.get('_id')}: {e}",
                retryable=False,
                original_error=e,
            ) from e

    def _to_models(self, documents: list[dict[str, Any]]) -> list[T]:
        """Convert list of MongoDB documents to Pydantic models."""
        return [self._to_model(doc) for doc in documents if doc is not None]

    def _to_document(self, model: T) -> dict[str, Any]:
        """Convert Pydantic model to MongoDB document."""
        return model.model_dump_mongo()

    @staticmethod
    def _to_object_id(id_value: str | ObjectId) -> Optional[ObjectId]:
        """Convert string to ObjectId; None when the string is not a valid id."""
        if isinstance(id_value, ObjectId):
            return id_value
        if isinstance(id_value, str) and ObjectId.is_valid(id_value):
            return ObjectId(id_value)
        return None

    # -------------------------------------------------------------------------
    # CRUD Operations
    # -------------------------------------------------------------------------

    def create(self, model: T) -> T:
        """Create a new document."""
        document = self._to_document(model)
        now = utcnow()
        document.setdefault("created_at", now)
        document["updated_at"] = now

        with self._storage_errors("insert"):
            result: InsertOneResult = self._get_collection().insert_one(document)
        model.id = result.inserted_id
        logger.debug(f"Created {self.collection_name} document: {result.inserted_id}")
        return model

    def get_by_id(self, id_value: str | ObjectId) -> Optional[T]:
        """Get a document by its ID; None for unknown or malformed ids."""
        object_id = self._to_object_id(id_value)
        if object_id is None:
            return None
        with self._storage_errors("find_one"):
            document = self._get_collection().find_one({"_id": object_id})
        return self._to_model(document)

    def find(
        self,
        query: dict[str, Any],
        skip: int = 0,
        limit: int = 0,
        sort: Optional[list[tuple[str, int]]] = None,
    ) -> list[T]:
        """Find documents matching a query. ``limit=0`` means no limit."""
        with self._storage_errors("find"):
            cursor = self._get_collection().find(query)
            cursor = cursor.sort(sort or [("created_at", -1)])
            if skip:
                cursor = cursor.skip(skip)
            if limit:
                cursor = cursor.limit(limit)
            documents = list(cursor)
        return self._to_models(documents)

    def find_one(self, query: dict[str, Any]) -> Optional[T]:
        """Find a single document matching a query."""
        with self._storage_errors("find_one"):
            document = self._get_collection().find_one(query)
        return self._to_model(document)

    def count(self, query: Optional[dict[str, Any]] = None) -> int:
        """Count documents matching a query."""
        with self._storage_errors("count"):
            return self._get_collection().count_documents(query or {})

    def aggregate(self, pipeline: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Run an aggregation pipeline and return raw result documents."""
        with self._storage_errors("aggregate"):
            return list(self._get_collection().aggregate(pipeline))
