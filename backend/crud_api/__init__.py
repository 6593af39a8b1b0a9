"""
Document CRUD Gateway — Application Package Initializer
========================================================

What: HTTP gateway forwarding create/read/update/delete calls to Firestore.

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← path/body extraction, status codes
    ├─────────────────────────────────────┤
    │     DocumentService (one call/op)   │  ← error-to-exception adapter
    ├─────────────────────────────────────┤
    │     Database handle (Firestore)     │  ← injected via Depends(get_db)
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
