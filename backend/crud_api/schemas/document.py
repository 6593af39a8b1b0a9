"""
Document CRUD Gateway — Pydantic Request/Response Schemas
==========================================================

What:  Pydantic models describing the API contract.
How:   Response models serialize route results. Request models only document
       the request bodies in OpenAPI (attached through openapi_extra); bodies
       are read raw and never validated against them, so malformed input
       reaches the database call and fails there as a 500.
"""

from typing import Any, Dict

from pydantic import BaseModel, Field


class CreateDocumentRequest(BaseModel):
    """Body of POST /create."""
    collection: str = Field(description="Collection to add the document to", examples=["users"])
    data: Dict[str, Any] = Field(
        description="Document fields, stored as-is",
        examples=[{"name": "John", "age": 30}],
    )


class UpdateDocumentRequest(BaseModel):
    """Body of PUT /update/{collection}/{id}."""
    data: Dict[str, Any] = Field(
        description="Fields to overwrite; unnamed fields are kept",
        examples=[{"name": "John", "age": 31}],
    )


class CreateDocumentResponse(BaseModel):
    """Returned by POST /create with HTTP 201."""
    id: str = Field(description="Identifier assigned by the database")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and database handle status.
    Who:   Returned by GET /health for monitoring and load balancer probes.
    """
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    database: str = Field(description="Database handle: configured, not_configured")
    uptime_seconds: float = Field(description="Seconds since service started")
