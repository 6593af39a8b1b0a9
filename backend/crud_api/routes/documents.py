"""
Document CRUD Gateway — CRUD Route Handlers
============================================

What:  The four document routes: create, read, update, delete.
How:   Each handler pulls its inputs from the path and/or JSON body, makes
       exactly one DocumentService call, and returns exactly one response.
       Failures propagate as CrudApiError subclasses to the global handlers
       in main.py, which render them as plain text.
Who:   Mounted by create_app() under settings.api_prefix (default "/api").

Route Inventory:
    POST   /create                       → 201 {"id": ...}
    GET    /read/{collection}/{id}       → 200 document data | 404
    PUT    /update/{collection}/{id}     → 200 "Document updated"
    DELETE /delete/{collection}/{id}     → 200 "Document deleted"
    Any database failure                 → 500 static per-operation message

Request bodies are read raw inside the operation guard: missing fields are
passed through as None and a body that is not a JSON object fails there,
so bad input surfaces as the operation's 500 rather than a 422.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from crud_api.schemas.document import (
    CreateDocumentRequest,
    CreateDocumentResponse,
    UpdateDocumentRequest,
)
from crud_api.services.document_service import (
    DocumentService,
    get_document_service,
    operation_guard,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["CRUD"])

_TEXT_ERROR = {"content": {"text/plain": {"schema": {"type": "string"}}}}


def _json_body(model) -> Dict[str, Any]:
    """OpenAPI requestBody entry for a body that is documented but not validated."""
    return {
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": model.model_json_schema()}},
        }
    }


@router.post(
    "/create",
    status_code=201,
    response_model=CreateDocumentResponse,
    responses={
        201: {"description": "Document created"},
        500: {"description": "Error creating document", **_TEXT_ERROR},
    },
    summary="Create a new document",
    openapi_extra=_json_body(CreateDocumentRequest),
)
async def create_document(
    request: Request,
    service: DocumentService = Depends(get_document_service),
) -> CreateDocumentResponse:
    async with operation_guard("create"):
        body = await request.json()
        collection = body.get("collection")
        data = body.get("data")

    document_id = await service.create_document(collection, data)
    return CreateDocumentResponse(id=document_id)


@router.get(
    "/read/{collection}/{document_id}",
    response_class=JSONResponse,
    responses={
        200: {"description": "Document retrieved"},
        404: {"description": "Document not found", **_TEXT_ERROR},
        500: {"description": "Error reading document", **_TEXT_ERROR},
    },
    summary="Get a document by ID",
)
async def read_document(
    collection: str,
    document_id: str,
    service: DocumentService = Depends(get_document_service),
) -> JSONResponse:
    """Returns the stored fields as the database hands them back."""
    data = await service.read_document(collection, document_id)

    # JSONResponse renders on construction; NaN or infinite floats fail here
    async with operation_guard("read", collection=collection, document_id=document_id):
        return JSONResponse(content=data, status_code=200)


@router.put(
    "/update/{collection}/{document_id}",
    response_class=PlainTextResponse,
    responses={
        200: {"description": "Document updated"},
        500: {"description": "Error updating document", **_TEXT_ERROR},
    },
    summary="Update a document by ID",
    openapi_extra=_json_body(UpdateDocumentRequest),
)
async def update_document(
    collection: str,
    document_id: str,
    request: Request,
    service: DocumentService = Depends(get_document_service),
) -> PlainTextResponse:
    async with operation_guard("update", collection=collection, document_id=document_id):
        body = await request.json()
        data = body.get("data")

    await service.update_document(collection, document_id, data)
    return PlainTextResponse("Document updated", status_code=200)


@router.delete(
    "/delete/{collection}/{document_id}",
    response_class=PlainTextResponse,
    responses={
        200: {"description": "Document deleted"},
        500: {"description": "Error deleting document", **_TEXT_ERROR},
    },
    summary="Delete a document by ID",
)
async def delete_document(
    collection: str,
    document_id: str,
    service: DocumentService = Depends(get_document_service),
) -> PlainTextResponse:
    await service.delete_document(collection, document_id)
    return PlainTextResponse("Document deleted", status_code=200)
