"""Tests for the HTTP surface: upload, poll, generate, health."""

import inspect
import sys
from pathlib import Path
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).parent.parent))

import main
from model_client import AICallFailure
from task_store import FileTaskStore


@pytest.fixture
def task_store(tmp_path: Path, monkeypatch) -> FileTaskStore:
    store = FileTaskStore(tmp_path)
    monkeypatch.setattr(main, "_task_store", store)
    return store


@pytest.fixture
def model_client(monkeypatch) -> MagicMock:
    client = MagicMock()
    client.health.return_value = {"status": "ready", "model": "gemini-test"}
    monkeypatch.setattr(main, "_model_client", client)
    return client


@pytest.fixture
def api() -> TestClient:
    return TestClient(main.app)


def _upload(api: TestClient, text: str):
    return api.post(
        "/api/v1/documents",
        files={"document": ("invoice.txt", text.encode(), "text/plain")},
    )


class TestUpload:
    def test_upload_runs_extraction(
        self, api: TestClient, task_store: FileTaskStore, model_client: MagicMock,
        invoice_text: str, invoice_fields_json: str,
    ):
        model_client.generate.return_value = invoice_fields_json

        resp = _upload(api, invoice_text)
        assert resp.status_code == 202
        task_id = resp.json()["taskId"]

        # TestClient runs background tasks before returning
        status = api.get(f"/api/v1/tasks/{task_id}").json()
        assert status["status"] == "complete"
        assert "message" not in status
        first = status["fields"][0]
        assert first["fieldName"] == "Customer Name"
        assert first["contextBefore"] == "Dear"
        assert first["contextAfter"] == ", your invoice #4521 is due on"
        assert first["validationRules"] == ["must not be empty", "should not contain numbers"]

    def test_model_failure_reported(
        self, api: TestClient, task_store: FileTaskStore, model_client: MagicMock, invoice_text: str,
    ):
        model_client.generate.side_effect = AICallFailure("Gemini returned HTTP 429: quota")

        task_id = _upload(api, invoice_text).json()["taskId"]

        status = api.get(f"/api/v1/tasks/{task_id}").json()
        assert status["status"] == "error"
        assert status["errorKind"] == "AICallFailure"
        assert "fields" not in status

    def test_prose_answer_reported_as_malformed(
        self, api: TestClient, task_store: FileTaskStore, model_client: MagicMock,
        invoice_text: str, mock_prose_response: str,
    ):
        model_client.generate.return_value = mock_prose_response

        task_id = _upload(api, invoice_text).json()["taskId"]

        status = api.get(f"/api/v1/tasks/{task_id}").json()
        assert status["status"] == "error"
        assert status["errorKind"] == "MalformedResponse"

    def test_empty_upload(self, api: TestClient, task_store: FileTaskStore, model_client: MagicMock):
        resp = _upload(api, "")
        assert resp.status_code == 400
        model_client.generate.assert_not_called()

    def test_ai_not_configured(self, api: TestClient, task_store: FileTaskStore, monkeypatch, invoice_text: str):
        monkeypatch.setattr(main, "_model_client", None)
        resp = _upload(api, invoice_text)
        assert resp.status_code == 503


class TestPoll:
    def test_unknown_task_reads_as_processing(self, api: TestClient, task_store: FileTaskStore):
        task_id = str(uuid4())
        resp = api.get(f"/api/v1/tasks/{task_id}")
        assert resp.status_code == 200
        assert resp.json() == {"taskId": task_id, "status": "processing"}

    def test_invalid_task_id(self, api: TestClient, task_store: FileTaskStore):
        resp = api.get("/api/v1/tasks/not-a-uuid")
        assert resp.status_code == 422


class TestGenerate:
    def test_generate_download(
        self, api: TestClient, task_store: FileTaskStore, model_client: MagicMock,
        invoice_text: str, invoice_fields_json: str,
    ):
        model_client.generate.return_value = invoice_fields_json
        task_id = _upload(api, invoice_text).json()["taskId"]

        resp = api.post(
            f"/api/v1/tasks/{task_id}/generate",
            json={"fields": [
                {"currentValue": "John Smith", "newValue": "Jane Doe"},
                {"currentValue": "5 March, 2024", "newValue": "1 April, 2024"},
            ]},
        )

        assert resp.status_code == 200
        assert resp.text == "Dear Jane Doe, your invoice #4521 is due on 1 April, 2024."
        assert resp.headers["content-type"].startswith("text/plain")
        assert 'filename="updated_document.txt"' in resp.headers["content-disposition"]

    def test_generate_unknown_task(self, api: TestClient, task_store: FileTaskStore):
        resp = api.post(f"/api/v1/tasks/{uuid4()}/generate", json={"fields": []})
        assert resp.status_code == 404


class TestHealth:
    def test_health_with_model(self, api: TestClient, model_client: MagicMock):
        body = api.get("/health").json()
        assert body["status"] == "healthy"
        assert body["ai_available"] is True
        assert body["model_health"]["status"] == "ready"

    def test_health_without_model(self, api: TestClient, monkeypatch):
        monkeypatch.setattr(main, "_model_client", None)
        body = api.get("/health").json()
        assert body["ai_available"] is False
        assert "model_health" not in body


class TestRouteExecution:
    def test_store_routes_run_in_threadpool(self):
        # File writes in these handlers must not block the event loop
        for handler in (main.upload_document, main.get_task, main.generate_document):
            assert not inspect.iscoroutinefunction(handler)
