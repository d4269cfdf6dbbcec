"""
Editor API Tests

Exercises the FastAPI routers with a mocked document store, a fresh session
registry and real JWT bearer tokens.
"""

import uuid
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from doceditor.api.http.documents import get_document_store
from doceditor.api.sessions import SessionRegistry, get_registry
from doceditor.core.config import settings
from doceditor.core.security import create_access_token
from doceditor.domains.editor.content import deserialize, make_document, paragraph
from doceditor.main import app, run

DOC_BODY = {
    "type": "doc",
    "content": [{"type": "paragraph", "content": [{"type": "text", "text": "Hello world"}]}],
}


@pytest.fixture
def user_id(record):
    return record.owner_id


@pytest.fixture
def auth_headers(user_id):
    token = create_access_token({"sub": str(user_id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def registry():
    return SessionRegistry()


@pytest_asyncio.fixture
async def client(mock_store, registry):
    """HTTP client with the store and session registry overridden."""
    app.dependency_overrides[get_document_store] = lambda: mock_store
    app.dependency_overrides[get_registry] = lambda: registry
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


class TestHealthAndAuth:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_missing_token(self, client, record):
        response = await client.post(f"/editor/{record.id}/session")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token(self, client, record):
        response = await client.post(
            f"/editor/{record.id}/session", headers={"Authorization": "Bearer not-a-token"}
        )
        assert response.status_code == 401


class TestDocumentsApi:
    @pytest.mark.asyncio
    async def test_create_document(self, client, mock_store, auth_headers, user_id, record):
        response = await client.post(f"/projects/{record.project_id}/documents", headers=auth_headers)

        assert response.status_code == 201
        assert response.json()["id"] == str(record.id)
        mock_store.create.assert_awaited_once_with(record.project_id, user_id)

    @pytest.mark.asyncio
    async def test_list_documents(self, client, auth_headers, record):
        response = await client.get(f"/projects/{record.project_id}/documents", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["total"] == 1

    @pytest.mark.asyncio
    async def test_get_missing_document(self, client, mock_store, auth_headers):
        mock_store.get.return_value = None
        response = await client.get(f"/documents/{uuid.uuid4()}", headers=auth_headers)
        assert response.status_code == 404


class TestEditorApi:
    @pytest.mark.asyncio
    async def test_open_session(self, client, auth_headers, record):
        response = await client.post(f"/editor/{record.id}/session?theme=dark", headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "ready"
        assert body["title"] == "Draft"
        assert body["word_count"] == 4
        assert body["theme"] == "dark"
        assert body["last_persisted_at"] is None

    @pytest.mark.asyncio
    async def test_open_missing_document(self, client, mock_store, auth_headers, registry):
        mock_store.get.return_value = None
        document_id = uuid.uuid4()

        response = await client.post(f"/editor/{document_id}/session", headers=auth_headers)

        assert response.status_code == 404
        assert registry.active_sessions == {}

    @pytest.mark.asyncio
    async def test_session_required(self, client, auth_headers, record):
        response = await client.get(f"/editor/{record.id}/session", headers=auth_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_edit_and_export(self, client, mock_store, auth_headers, registry, user_id, record):
        await client.post(f"/editor/{record.id}/session", headers=auth_headers)

        response = await client.put(
            f"/editor/{record.id}/content", json={"content": DOC_BODY}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["word_count"] == 2

        exported = await client.get(f"/editor/{record.id}/export?format=txt", headers=auth_headers)
        assert exported.status_code == 200
        assert exported.text == "Hello world"
        assert exported.headers["content-type"].startswith("text/plain")
        assert "Draft.txt" in exported.headers["content-disposition"]

        await registry.get(user_id, record.id).wait_for_pending_writes()
        stored = mock_store.update_content.await_args.args[1]
        assert deserialize(stored) == make_document(paragraph("Hello world"))

    @pytest.mark.asyncio
    async def test_invalid_content_is_rejected(self, client, auth_headers, record):
        await client.post(f"/editor/{record.id}/session", headers=auth_headers)

        response = await client.put(
            f"/editor/{record.id}/content",
            json={"content": {"type": "doc", "content": [{"type": "spreadsheet"}]}},
            headers=auth_headers,
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_markup_in_list_start_is_rejected(self, client, mock_store, auth_headers, record):
        await client.post(f"/editor/{record.id}/session", headers=auth_headers)
        injected = {
            "type": "doc",
            "content": [
                {
                    "type": "orderedList",
                    "attrs": {"start": "2\"><script>alert(1)</script>"},
                    "content": [{"type": "listItem", "content": [{"type": "paragraph"}]}],
                }
            ],
        }

        response = await client.put(
            f"/editor/{record.id}/content", json={"content": injected}, headers=auth_headers
        )
        assert response.status_code == 422

        exported = await client.get(f"/editor/{record.id}/export?format=html", headers=auth_headers)
        assert "<script>" not in exported.text
        mock_store.update_content.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_title_commit(self, client, mock_store, auth_headers, record):
        await client.post(f"/editor/{record.id}/session", headers=auth_headers)

        await client.put(f"/editor/{record.id}/title", json={"title": "Final"}, headers=auth_headers)
        first = await client.post(f"/editor/{record.id}/title/commit", headers=auth_headers)
        second = await client.post(f"/editor/{record.id}/title/commit", headers=auth_headers)

        assert first.json()["title"] == "Final"
        assert first.json()["last_persisted_at"] is not None
        assert second.status_code == 200
        mock_store.update_title.assert_awaited_once_with(record.id, "Final")

    @pytest.mark.asyncio
    async def test_failed_title_commit_is_reported(self, client, mock_store, auth_headers, record):
        mock_store.update_title.side_effect = ConnectionError("store unreachable")
        await client.post(f"/editor/{record.id}/session", headers=auth_headers)
        await client.put(f"/editor/{record.id}/title", json={"title": "Final"}, headers=auth_headers)

        response = await client.post(f"/editor/{record.id}/title/commit", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["pending_title"] == "Final"
        assert body["title"] == "Draft"
        assert body["last_error"]["kind"] == "title_commit"

    @pytest.mark.asyncio
    async def test_formatting_command(self, client, auth_headers, record):
        await client.post(f"/editor/{record.id}/session", headers=auth_headers)

        response = await client.post(
            f"/editor/{record.id}/commands",
            json={"command": {"kind": "toggle_mark", "mark": "bold"}, "selection_start": 0},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["active"] is True

        exported = await client.get(f"/editor/{record.id}/export?format=html", headers=auth_headers)
        assert "<strong>Start writing your masterpiece...</strong>" in exported.text

    @pytest.mark.asyncio
    async def test_selection_out_of_range(self, client, auth_headers, record):
        await client.post(f"/editor/{record.id}/session", headers=auth_headers)

        response = await client.post(
            f"/editor/{record.id}/commands",
            json={"command": {"kind": "set_alignment", "align": "center"}, "selection_start": 7},
            headers=auth_headers,
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_view_flags(self, client, auth_headers, record):
        await client.post(f"/editor/{record.id}/session", headers=auth_headers)

        response = await client.put(
            f"/editor/{record.id}/view",
            json={"fullscreen": True, "toolbar_visible": False, "theme": "sepia"},
            headers=auth_headers,
        )

        body = response.json()
        assert body["fullscreen"] is True
        assert body["toolbar_visible"] is False
        assert body["theme"] == "sepia"

    @pytest.mark.asyncio
    async def test_close_session(self, client, auth_headers, record):
        await client.post(f"/editor/{record.id}/session", headers=auth_headers)

        response = await client.delete(f"/editor/{record.id}/session", headers=auth_headers)
        assert response.status_code == 204

        response = await client.get(f"/editor/{record.id}/session", headers=auth_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_sessions_are_per_user(self, client, auth_headers, record):
        await client.post(f"/editor/{record.id}/session", headers=auth_headers)

        other = {"Authorization": f"Bearer {create_access_token({'sub': str(uuid.uuid4())})}"}
        response = await client.get(f"/editor/{record.id}/session", headers=other)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_foreign_document_cannot_be_opened(self, client, mock_store, registry, record):
        stranger = {"Authorization": f"Bearer {create_access_token({'sub': str(uuid.uuid4())})}"}

        response = await client.post(f"/editor/{record.id}/session", headers=stranger)

        assert response.status_code == 403
        assert registry.active_sessions == {}
        mock_store.update_content.assert_not_awaited()


class TestServerEntry:
    def test_run_serves_app_with_configured_address(self):
        with patch("doceditor.main.uvicorn.run") as mock_run:
            run()

        mock_run.assert_called_once_with(
            "doceditor.main:app",
            host=settings.server_host,
            port=settings.server_port,
            log_level=settings.log_level.lower(),
        )
