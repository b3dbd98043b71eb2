"""
HTTP surface: login, bearer auth, operation routing and the error envelope.
"""

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from conftest import TEST_SETTINGS, FakeProviders, FakeTextModel, make_context

from flowops.api.dependencies import (
    get_http_client,
    get_operation_context,
    get_sdk_clients,
    get_settings,
)
from flowops.config import Settings
from flowops.main import create_app


AUTH = {"Authorization": "Bearer test-token"}

providers = FakeProviders()


def get_test_context():
    return make_context(providers)


app = create_app(TEST_SETTINGS)
app.dependency_overrides[get_operation_context] = get_test_context

client = TestClient(app)


@pytest.fixture(autouse=True)
def reset_providers():
    providers.text_model = FakeTextModel()
    providers.requested.clear()
    yield


class TestHealth:

    def test_health_is_public(self):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestLogin:

    def test_login_success(self):
        response = client.post("/api/login", json={"username": "editor", "password": "s3cret"})
        assert response.status_code == 200
        assert response.json() == {"success": True, "token": "test-token"}

    def test_login_wrong_password(self):
        response = client.post("/api/login", json={"username": "editor", "password": "nope"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid credentials", "code": "INVALID_CREDENTIALS"}

    def test_login_not_configured(self):
        bare = TestClient(create_app(Settings()))
        response = bare.post("/api/login", json={"username": "a", "password": "b"})
        assert response.status_code == 500
        assert response.json()["code"] == "CONFIGURATION_ERROR"

    def test_me(self):
        assert client.get("/api/me", headers=AUTH).json() == {"authenticated": True}

        response = client.get("/api/me")
        assert response.status_code == 401
        assert response.json()["code"] == "NOT_AUTHENTICATED"


class TestOperationAuth:

    @pytest.mark.parametrize(
        "headers",
        [{}, {"Authorization": "test-token"}, {"Authorization": "Bearer wrong"}, {"Authorization": "Bearer "}],
    )
    def test_operations_require_token(self, headers):
        response = client.post("/api/operations/enhance-text", json={"text": "hi"}, headers=headers)
        assert response.status_code == 401
        assert response.json() == {"error": "Not authenticated", "code": "NOT_AUTHENTICATED"}
        assert providers.requested == []


class TestOperationRoutes:

    def test_list_operations(self):
        response = client.get("/api/operations", headers=AUTH)
        assert response.status_code == 200
        assert "animate" in response.json()["operations"]

    def test_run_operation(self):
        providers.text_model = FakeTextModel(["Enhanced!"])

        response = client.post("/api/operations/enhance-text", json={"text": "hi"}, headers=AUTH)

        assert response.status_code == 200
        assert response.json() == {"result": "Enhanced!"}

    def test_missing_field(self):
        response = client.post("/api/operations/animate", json={"imageUrl": ""}, headers=AUTH)
        assert response.status_code == 400
        assert response.json() == {"error": "Missing imageUrl field", "code": "MISSING_IMAGE"}
        assert providers.requested == []

    def test_non_object_body(self):
        response = client.post("/api/operations/classify", json=["a"], headers=AUTH)
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_REQUEST"

    def test_unknown_operation(self):
        response = client.post("/api/operations/make-coffee", json={}, headers=AUTH)
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_unknown_route(self):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json() == {"error": "Not found", "code": "NOT_FOUND"}

    def test_upstream_error_envelope(self):
        from flowops.errors import UpstreamError

        providers.text_model = FakeTextModel([UpstreamError("Gemini API error", code="GEMINI_ERROR", details="quota")])

        response = client.post("/api/operations/enhance-text", json={"text": "hi"}, headers=AUTH)

        assert response.status_code == 502
        assert response.json() == {"error": "Gemini API error", "code": "GEMINI_ERROR", "details": "quota"}

    def test_unexpected_error_is_internal(self):
        providers.text_model = FakeTextModel([RuntimeError("boom")])
        safe_client = TestClient(app, raise_server_exceptions=False)

        response = safe_client.post("/api/operations/enhance-text", json={"text": "hi"}, headers=AUTH)

        assert response.status_code == 500
        assert response.json()["code"] == "INTERNAL_ERROR"


class TestSharedClients:

    def test_requests_share_sdk_clients(self):
        seen = []

        def capturing_context(
            settings=Depends(get_settings),
            http=Depends(get_http_client),
            clients=Depends(get_sdk_clients),
        ):
            seen.append(get_operation_context(settings, http, clients))
            return make_context(providers)

        shared_app = create_app(TEST_SETTINGS)
        shared_app.dependency_overrides[get_operation_context] = capturing_context

        with TestClient(shared_app) as shared_client:
            for _ in range(2):
                response = shared_client.post("/api/operations/classify", json={"inputValue": "hi"}, headers=AUTH)
                assert response.status_code == 200

            first, second = seen[0].providers, seen[1].providers
            assert first is not second
            assert first.genai_client is second.genai_client
            assert first.openai_client is second.openai_client
            assert seen[0].http is seen[1].http

        clients = shared_app.state.sdk_clients
        assert clients._genai is None
        assert clients._openai is None
