"""
Document CRUD Gateway — Document Service
=========================================

What:  Performs the single database call behind each CRUD route and translates
       its outcome into a return value or an application exception.
How:   DocumentService wraps an injected Firestore-style handle. Every call runs
       inside operation_guard(), the one error adapter shared by all four
       operations: any exception becomes DocumentOperationError (→ 500) and is
       logged with its traceback.
Who:   Constructed per request by get_document_service(); called by the routes.

Operation mapping:
    create  → collection(c).add(data)            → new document id
    read    → collection(c).document(id).get()   → data, or DocumentNotFoundError
    update  → collection(c).document(id).update(data)
    delete  → collection(c).document(id).delete()

Nothing here retries, validates, batches or interprets document contents.
Update on a missing document fails the way the client fails (Firestore raises
NotFound), which is reported as a generic 500 like every other write error.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import Depends
from fastapi.encoders import jsonable_encoder
from google.cloud.firestore import GeoPoint
from google.cloud.firestore_v1.base_document import BaseDocumentReference

from crud_api.database import get_db
from crud_api.exceptions import (
    CrudApiError,
    DocumentNotFoundError,
    DocumentOperationError,
)
from crud_api.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

DocumentData = Dict[str, Any]

# Firestore value types whose attributes are not their JSON form
FIRESTORE_ENCODERS = {
    GeoPoint: lambda point: {"latitude": point.latitude, "longitude": point.longitude},
    BaseDocumentReference: lambda ref: ref.path,
}


@asynccontextmanager
async def operation_guard(operation: str, **context: Any) -> AsyncIterator[None]:
    """
    Translate any failure inside the block into DocumentOperationError.

    Application exceptions (DocumentNotFoundError etc.) pass through unchanged.
    Everything else is logged server-side with the request id and traceback,
    then re-raised as DocumentOperationError chained to the original.

    Example:
        async with operation_guard("delete", collection=c, document_id=i):
            await db.collection(c).document(i).delete()
    """
    try:
        yield
    except CrudApiError:
        raise
    except Exception as e:
        rid = request_id_var.get("")
        logger.error(
            "[%s] Document %s failed: %s | Context: %s",
            rid,
            operation,
            str(e),
            context,
            exc_info=True,
        )
        raise DocumentOperationError(
            operation,
            context={**context, "error_type": type(e).__name__},
        ) from e


class DocumentService:
    """
    One-call-per-operation facade over the document database handle.

    The service holds no state besides the handle, so a fresh instance per
    request is free; concurrent requests share only the underlying client.
    """

    def __init__(self, db: Any):
        self.db = db

    async def create_document(self, collection: Optional[str], data: Optional[DocumentData]) -> str:
        """
        Add a document with a database-assigned id.

        Returns:
            The id of the new document.

        Raises:
            DocumentOperationError: The add call failed (bad collection name,
                non-mapping data, permission denied, network error, ...).
        """
        async with operation_guard("create", collection=collection):
            _write_time, document_ref = await self.db.collection(collection).add(data)
            logger.info("Created document %s/%s", collection, document_ref.id)
            return document_ref.id

    async def read_document(self, collection: str, document_id: str) -> DocumentData:
        """
        Fetch a document's data, already converted to JSON-compatible values.

        Geo points become {"latitude", "longitude"} objects and document
        references their path. Encoding happens inside the guard: values with
        no JSON form (e.g. bytes that are not UTF-8) fail the read like any
        database error.

        Raises:
            DocumentNotFoundError: The snapshot reports the document is absent.
            DocumentOperationError: The get call or the JSON encoding failed.
        """
        async with operation_guard("read", collection=collection, document_id=document_id):
            snapshot = await self.db.collection(collection).document(document_id).get()
            if not snapshot.exists:
                raise DocumentNotFoundError(collection=collection, document_id=document_id)
            return jsonable_encoder(snapshot.to_dict() or {}, custom_encoder=FIRESTORE_ENCODERS)

    async def update_document(
        self, collection: str, document_id: str, data: Optional[DocumentData]
    ) -> None:
        """
        Apply a partial update; fields not named in `data` are left untouched.

        Raises:
            DocumentOperationError: The update call failed, including the
                client's own error for a document that does not exist.
        """
        async with operation_guard("update", collection=collection, document_id=document_id):
            await self.db.collection(collection).document(document_id).update(data)
            logger.info("Updated document %s/%s", collection, document_id)

    async def delete_document(self, collection: str, document_id: str) -> None:
        """
        Delete a document. Deleting a missing document is not an error in Firestore.

        Raises:
            DocumentOperationError: The delete call failed.
        """
        async with operation_guard("delete", collection=collection, document_id=document_id):
            await self.db.collection(collection).document(document_id).delete()
            logger.info("Deleted document %s/%s", collection, document_id)


def get_document_service(db: Any = Depends(get_db)) -> DocumentService:
    """FastAPI dependency: a DocumentService bound to the injected database handle."""
    return DocumentService(db)
