"""
Document CRUD Gateway — Document Service Unit Tests
====================================================

What:  Tests for DocumentService and the shared operation_guard adapter.
How:   Uses MagicMock/AsyncMock database handles (no Firestore needed).

What we test:
    ✅ Each operation makes exactly one call with the given arguments
    ✅ Missing document on read raises DocumentNotFoundError
    ✅ Any database exception becomes DocumentOperationError with the
       operation's static message, chained to the original
    ✅ Application exceptions pass through the guard untouched
"""

from unittest.mock import MagicMock

import pytest
from google.api_core import exceptions as gcp_exceptions

from crud_api.exceptions import DocumentNotFoundError, DocumentOperationError
from crud_api.services.document_service import DocumentService, operation_guard


def _snapshot(data):
    snapshot = MagicMock()
    snapshot.exists = data is not None
    snapshot.to_dict.return_value = data
    return snapshot


class TestCreateDocument:

    @pytest.mark.asyncio
    async def test_returns_new_id(self, mock_db):
        doc_ref = MagicMock()
        doc_ref.id = "abc123"
        mock_db.collection_ref.add.return_value = (object(), doc_ref)

        result = await DocumentService(mock_db).create_document("users", {"name": "John", "age": 30})

        assert result == "abc123"
        mock_db.collection.assert_called_once_with("users")
        mock_db.collection_ref.add.assert_awaited_once_with({"name": "John", "age": 30})

    @pytest.mark.asyncio
    async def test_failure_wrapped(self, failing_db):
        with pytest.raises(DocumentOperationError) as exc_info:
            await DocumentService(failing_db).create_document("users", {"a": 1})

        assert exc_info.value.message == "Error creating document"
        assert exc_info.value.context["error_type"] == "PermissionDenied"
        assert isinstance(exc_info.value.__cause__, gcp_exceptions.PermissionDenied)

    @pytest.mark.asyncio
    async def test_missing_collection_fails_as_operation_error(self, mock_db):
        """No input validation: a None collection fails inside the database call."""
        mock_db.collection.side_effect = TypeError("collection path must be str")

        with pytest.raises(DocumentOperationError, match="Error creating document"):
            await DocumentService(mock_db).create_document(None, {"a": 1})


class TestReadDocument:

    @pytest.mark.asyncio
    async def test_returns_data(self, mock_db):
        mock_db.doc_ref.get.return_value = _snapshot({"name": "John", "age": 30})

        result = await DocumentService(mock_db).read_document("users", "abc123")

        assert result == {"name": "John", "age": 30}
        mock_db.collection.assert_called_once_with("users")
        mock_db.collection_ref.document.assert_called_once_with("abc123")

    @pytest.mark.asyncio
    async def test_missing_raises_not_found(self, mock_db):
        mock_db.doc_ref.get.return_value = _snapshot(None)

        with pytest.raises(DocumentNotFoundError) as exc_info:
            await DocumentService(mock_db).read_document("users", "nope")

        assert exc_info.value.message == "Document not found"
        assert exc_info.value.context == {"collection": "users", "document_id": "nope"}

    @pytest.mark.asyncio
    async def test_failure_wrapped(self, failing_db):
        with pytest.raises(DocumentOperationError, match="Error reading document"):
            await DocumentService(failing_db).read_document("users", "abc123")

    @pytest.mark.asyncio
    async def test_unencodable_value_is_read_error(self, mock_db):
        mock_db.doc_ref.get.return_value = _snapshot({"raw": b"\xff\xfe"})

        with pytest.raises(DocumentOperationError, match="Error reading document") as exc_info:
            await DocumentService(mock_db).read_document("users", "abc123")

        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)


class TestUpdateDocument:

    @pytest.mark.asyncio
    async def test_passes_data_through(self, mock_db):
        await DocumentService(mock_db).update_document("users", "abc123", {"age": 31})

        mock_db.doc_ref.update.assert_awaited_once_with({"age": 31})

    @pytest.mark.asyncio
    async def test_missing_document_is_operation_error(self, mock_db):
        """The client's NotFound on update is not reinterpreted as a 404."""
        mock_db.doc_ref.update.side_effect = gcp_exceptions.NotFound("No document to update")

        with pytest.raises(DocumentOperationError) as exc_info:
            await DocumentService(mock_db).update_document("users", "ghost", {"age": 31})

        assert exc_info.value.message == "Error updating document"
        assert not isinstance(exc_info.value, DocumentNotFoundError)


class TestDeleteDocument:

    @pytest.mark.asyncio
    async def test_deletes(self, mock_db):
        await DocumentService(mock_db).delete_document("users", "abc123")

        mock_db.collection_ref.document.assert_called_once_with("abc123")
        mock_db.doc_ref.delete.assert_awaited_once_with()

    @pytest.mark.asyncio
    async def test_failure_wrapped(self, failing_db):
        with pytest.raises(DocumentOperationError, match="Error deleting document"):
            await DocumentService(failing_db).delete_document("users", "abc123")


class TestOperationGuard:

    @pytest.mark.asyncio
    async def test_app_errors_pass_through(self):
        with pytest.raises(DocumentNotFoundError):
            async with operation_guard("read"):
                raise DocumentNotFoundError(collection="users", document_id="x")

    @pytest.mark.asyncio
    async def test_context_recorded(self):
        with pytest.raises(DocumentOperationError) as exc_info:
            async with operation_guard("delete", collection="users", document_id="x"):
                raise ConnectionError("unreachable")

        assert exc_info.value.context == {
            "collection": "users",
            "document_id": "x",
            "error_type": "ConnectionError",
            "operation": "delete",
        }

    @pytest.mark.asyncio
    async def test_failure_logged_with_traceback(self, caplog):
        with pytest.raises(DocumentOperationError):
            async with operation_guard("create", collection="users"):
                raise RuntimeError("boom")

        records = [r for r in caplog.records if r.name == "crud_api.services.document_service"]
        assert records
        assert records[-1].exc_info is not None
        assert "boom" in records[-1].getMessage()
