"""
Firestore client implementation with connection management and error handling.
"""
import os
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union
from uuid import UUID

import structlog
from google.cloud import firestore
from google.cloud.firestore import Client as FirestoreClient
from google.cloud.firestore import FieldFilter, Query
from pydantic import BaseModel

from ..config import get_settings
from ..utils.exceptions import DatabaseError

logger = structlog.get_logger()

DocumentData = Union[BaseModel, Dict[str, Any]]


class FirestoreService:
    """
    Firestore service with connection management and document serialization.

    Documents are addressed by slash-separated paths such as
    ``users/{uid}`` or ``users/{uid}/settings/preferences``.
    """

    def __init__(self):
        """Initialize Firestore client with configuration."""
        self._client: Optional[FirestoreClient] = None
        self._settings = get_settings()

    @property
    def client(self) -> FirestoreClient:
        """Get or create Firestore client."""
        if self._client is None:
            self._client = self._create_client()
        return self._client

    def _create_client(self) -> FirestoreClient:
        """Create and configure Firestore client."""
        try:
            if self._settings.use_firestore_emulator:
                # Configure for emulator
                os.environ["FIRESTORE_EMULATOR_HOST"] = self._settings.firestore_emulator_host
                client = firestore.Client(
                    project=self._settings.firestore_project_id,
                    database=self._settings.firestore_database
                )
                logger.info(
                    "Connected to Firestore emulator",
                    host=self._settings.firestore_emulator_host,
                    project=self._settings.firestore_project_id
                )
            else:
                if self._settings.google_credentials_path:
                    os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = self._settings.google_credentials_path

                client = firestore.Client(
                    project=self._settings.firestore_project_id,
                    database=self._settings.firestore_database
                )
                logger.info(
                    "Connected to Firestore",
                    project=self._settings.firestore_project_id
                )

            return client

        except Exception as e:
            logger.error("Failed to create Firestore client", error=str(e))
            raise DatabaseError(
                message="Failed to connect to database",
                code="FIRESTORE_CONNECTION_ERROR",
                details=[str(e)]
            )

    def _serialize_value(self, value: Any) -> Any:
        """Convert Python values into types Firestore accepts."""
        if isinstance(value, Decimal):
            return float(value)
        if isinstance(value, UUID):
            return str(value)
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            # Calendar dates are stored as UTC midnight timestamps
            return datetime(value.year, value.month, value.day)
        if isinstance(value, dict):
            return {key: self._serialize_value(item) for key, item in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._serialize_value(item) for item in value]
        return value

    def _serialize(self, data: DocumentData) -> Dict[str, Any]:
        """Serialize a model or mapping to Firestore document data."""
        if isinstance(data, BaseModel):
            to_document = getattr(data, "to_document", None)
            data = to_document() if to_document else data.model_dump()
        return self._serialize_value(dict(data))

    async def get_document(self, path: str) -> Optional[Dict[str, Any]]:
        """Read a document; None when it does not exist."""
        try:
            snapshot = self.client.document(path).get()

            if not snapshot.exists:
                logger.debug("Document not found", path=path)
                return None

            return snapshot.to_dict()

        except Exception as e:
            logger.error("Failed to get document", path=path, error=str(e))
            raise DatabaseError(
                message="Failed to retrieve document",
                code="GET_DOCUMENT_ERROR",
                details=[str(e)]
            )

    async def set_document(
        self,
        path: str,
        data: DocumentData,
        merge: bool = False
    ) -> None:
        """Write a full document, or merge the given fields into it."""
        try:
            doc_data = self._serialize(data)
            self.client.document(path).set(doc_data, merge=merge)

            logger.info(
                "Document written",
                path=path,
                merge=merge,
                fields=sorted(doc_data.keys()) if merge else None
            )

        except Exception as e:
            logger.error("Failed to write document", path=path, merge=merge, error=str(e))
            raise DatabaseError(
                message="Failed to write document",
                code="SET_DOCUMENT_ERROR",
                details=[str(e)]
            )

    async def add_document(self, collection: str, data: DocumentData) -> str:
        """Add a document with a generated ID to a collection."""
        try:
            doc_data = self._serialize(data)
            _, doc_ref = self.client.collection(collection).add(doc_data)

            logger.info("Document created", collection=collection, document_id=doc_ref.id)
            return doc_ref.id

        except Exception as e:
            logger.error("Failed to create document", collection=collection, error=str(e))
            raise DatabaseError(
                message="Failed to create document",
                code="CREATE_DOCUMENT_ERROR",
                details=[str(e)]
            )

    async def query_documents(
        self,
        collection: str,
        where_clauses: Optional[List[Tuple[str, str, Any]]] = None,
        order_by: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Query documents with filters; each result carries its ``id``."""
        try:
            query = self.client.collection(collection)

            if where_clauses:
                for field, operator, value in where_clauses:
                    query = query.where(filter=FieldFilter(field, operator, self._serialize_value(value)))

            if order_by:
                direction = Query.DESCENDING if order_by.startswith("-") else Query.ASCENDING
                query = query.order_by(order_by.lstrip("-"), direction=direction)

            if limit:
                query = query.limit(limit)

            results = []
            for doc in query.stream():
                doc_data = doc.to_dict()
                doc_data["id"] = doc.id
                results.append(doc_data)

            logger.info(
                "Documents queried",
                collection=collection,
                count=len(results),
                filters=where_clauses,
                order_by=order_by,
                limit=limit
            )

            return results

        except Exception as e:
            logger.error("Failed to query documents", collection=collection, error=str(e))
            raise DatabaseError(
                message="Failed to query documents",
                code="QUERY_DOCUMENTS_ERROR",
                details=[str(e)]
            )

    def close(self) -> None:
        """Close the underlying client."""
        if self._client is not None:
            self._client.close()
            self._client = None


# Global Firestore service instance
_firestore_service: Optional[FirestoreService] = None


def get_firestore() -> FirestoreService:
    """Get the global Firestore service instance."""
    global _firestore_service
    if _firestore_service is None:
        _firestore_service = FirestoreService()
    return _firestore_service


async def cleanup_firestore():
    """Cleanup Firestore connections."""
    global _firestore_service
    if _firestore_service:
        _firestore_service.close()
        _firestore_service = None
        logger.info("Firestore client closed")
