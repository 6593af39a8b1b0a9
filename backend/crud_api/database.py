"""
Document CRUD Gateway — Firestore Client Management
====================================================

What:  Builds the Firestore AsyncClient, exposes it as a FastAPI dependency,
       and closes it on shutdown.
How:   create_firestore_client() resolves credentials from settings and returns
       a google.cloud.firestore.AsyncClient. The app stores the handle on
       app.state.db; get_db() hands it to route handlers through Depends().
Who:   Lifespan handler (init/close) and route handlers (get_db).
When:  Client is created once at startup; get_db runs per request.

The client library owns connection pooling, retries and consistency. This
module never wraps or re-implements any of that.

Handle contract (the subset of the Firestore async API the routes use):
    db.collection(name).add(data)            -> (write_time, document_reference)
    db.collection(name).document(id).get()   -> snapshot (.exists, .to_dict())
    db.collection(name).document(id).update(data)
    db.collection(name).document(id).delete()
"""

import inspect
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request
from google.cloud import firestore
from google.oauth2 import service_account

from crud_api.config import Settings, settings as default_settings
from crud_api.exceptions import DatabaseNotConfiguredError

logger = logging.getLogger(__name__)


def _load_service_account_info(config: Settings) -> Optional[Dict[str, Any]]:
    """Return the service account dict from the inline key or the key file, if any."""
    if config.firebase_service_account_key:
        key_json = config.firebase_service_account_key.get_secret_value()
        if key_json:
            try:
                return json.loads(key_json)
            except json.JSONDecodeError as e:
                raise ValueError("FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON") from e

    path = config.firebase_service_account_path
    if path:
        resolved = Path(path).expanduser().resolve()
        if not resolved.is_file():
            raise ValueError(
                f"FIREBASE_SERVICE_ACCOUNT_PATH set but file not found: {path} (resolved: {resolved})"
            )
        with open(resolved, encoding="utf-8") as f:
            return json.load(f)
    return None


def create_firestore_client(config: Optional[Settings] = None) -> firestore.AsyncClient:
    """
    Build a Firestore AsyncClient from settings.

    With a service account (inline or file), the project defaults to the key's
    project_id. Without one, Application Default Credentials are used; the
    library also honors FIRESTORE_EMULATOR_HOST on its own.

    Raises:
        ValueError: The configured service account key is unreadable.
        google.auth.exceptions.DefaultCredentialsError: No credentials found.
    """
    config = config or default_settings
    info = _load_service_account_info(config)

    if info is not None:
        credentials = service_account.Credentials.from_service_account_info(info)
        project = config.firestore_project_id or info.get("project_id")
        client = firestore.AsyncClient(
            project=project,
            credentials=credentials,
            database=config.firestore_database,
        )
    else:
        client = firestore.AsyncClient(
            project=config.firestore_project_id,
            database=config.firestore_database,
        )

    logger.info(
        "Firestore client created: project=%s database=%s",
        client.project,
        config.firestore_database,
    )
    return client


def init_firestore(config: Optional[Settings] = None) -> Optional[firestore.AsyncClient]:
    """
    Create the Firestore client for app startup, or None on failure.

    Initialization errors are logged with traceback and swallowed so the app
    still starts; CRUD routes then answer 500 via DatabaseNotConfiguredError.
    """
    try:
        return create_firestore_client(config)
    except Exception:
        logger.exception("Firestore initialization failed")
        return None


async def close_firestore(client: Any) -> None:
    """Close the client's transport if it exposes close(); sync or async both work."""
    if client is None:
        return
    close = getattr(client, "close", None)
    if close is None:
        return
    result = close()
    if inspect.isawaitable(result):
        await result
    logger.info("Firestore client closed")


# ── Request Dependency ────────────────────────────────────────────────────
def get_db(request: Request) -> Any:
    """
    FastAPI dependency that returns the app's database handle.

    Example usage in a route:
        @router.get("/read/{collection}/{document_id}")
        async def read_document(..., db=Depends(get_db)):
            ...

    Tests replace it with app.dependency_overrides[get_db] or pass a fake
    handle to create_app(db=...).

    Raises:
        DatabaseNotConfiguredError: No handle was injected or initialized.
    """
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise DatabaseNotConfiguredError()
    return db
