import json
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from portfoliocms.api.main import create_app
from portfoliocms.domain import EntityKind
from portfoliocms.infrastructure import get_orchestrator


@pytest.fixture()
def client(orchestrator) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    # No context manager: the database lifespan is not started
    return TestClient(app)


class TestMutationRoutes:
    def test_create_project_with_thumbnail(self, client, blob_store) -> None:
        response = client.post(
            "/projects",
            data={"payload": json.dumps({"title": "Portfolio site", "status": "live"})},
            files={"attachment": ("shot.png", b"\x89PNG", "image/png")},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["title"] == "Portfolio site"
        assert body["thumbnail"] == blob_store.upload.return_value
        blob_store.delete.assert_not_called()

    def test_invalid_payload_is_a_bad_request(self, client, blob_store) -> None:
        response = client.post("/technologies", data={"payload": "[1, 2"})

        assert response.status_code == 400
        assert response.json() == {"message": "Payload must be a JSON object", "code": "BAD_REQUEST", "status": 400}
        assert blob_store.method_calls == []

    def test_update_with_malformed_id(self, client) -> None:
        response = client.patch("/certificates/not-an-id", data={"payload": json.dumps({"title": "x"})})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid certificate id provided"

    def test_delete_experience(self, client, stores, blob_store) -> None:
        existing = stores[EntityKind.EXPERIENCE].seed(
            company="ACME",
            position="Engineer",
            from_date=datetime(2020, 1, 1),
            company_logo="https://assets.example.com/portfolio/company_logos/logo77",
        )

        response = client.delete(f"/experiences/{existing['id']}")

        assert response.status_code == 200
        assert response.json()["company"] == "ACME"
        blob_store.delete.assert_called_once_with("logo77", "company_logos")

    def test_unknown_collection_is_rejected(self, client) -> None:
        response = client.post("/invoices", data={"payload": "{}"})

        assert response.status_code == 422
