"""Tests for the upload endpoint."""

from fastapi.testclient import TestClient

from procflow.api.v1.dependencies import get_upload_store
from tests.helpers.factories import StubUploadStore


class TestUpload:
    """Tests for POST /api/v1/upload."""

    def test_returns_name_and_url(self, client: TestClient, technician, api_uploads):
        response = client.post(
            "/api/v1/upload",
            json={"filename": "a.png", "content": "data:image/png;base64,AA==", "type": "image/png"},
            headers=technician,
        )

        assert response.status_code == 200
        assert response.json() == {"filename": "stored_a.png", "url": "/data/stored_a.png"}
        assert api_uploads.calls == [("a.png", "data:image/png;base64,AA==", "image/png")]

    def test_storage_failure(self, client: TestClient, app, technician):
        app.dependency_overrides[get_upload_store] = lambda: StubUploadStore(fail=True)

        response = client.post(
            "/api/v1/upload",
            json={"filename": "a.png", "content": "x"},
            headers=technician,
        )

        assert response.status_code == 502
        assert response.json()["detail"]["error_code"] == "UPLOAD_FAILED"
