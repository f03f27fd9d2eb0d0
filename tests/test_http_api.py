"""Tests for the FastAPI credential relay."""

import json

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from bouquetai import config
from bouquetai.api.http_api import app

YANDEX_HEADERS = {"Authorization": "Api-Key ya-key", "x-folder-id": "b1gfolder"}


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


class TestOpenAIProxy:
    @respx.mock
    def test_forwards_body_and_authorization(self, client):
        route = respx.post(f"{config.OPENAI_API_URL}/chat/completions").mock(
            return_value=httpx.Response(200, json={"choices": [{"message": {"content": "hi"}}]})
        )

        response = client.post(
            "/api/openai/v1/chat/completions",
            json={"model": "gpt-4", "messages": []},
            headers={"Authorization": "Bearer sk-test", "X-Extra": "dropped"},
        )

        assert response.status_code == 200
        assert response.json()["choices"][0]["message"]["content"] == "hi"
        sent = route.calls.last.request
        assert sent.headers["authorization"] == "Bearer sk-test"
        assert "x-extra" not in sent.headers
        assert json.loads(sent.content) == {"model": "gpt-4", "messages": []}

    @respx.mock
    def test_rewrites_nested_paths(self, client):
        route = respx.post(f"{config.OPENAI_API_URL}/images/generations").mock(
            return_value=httpx.Response(200, json={"data": []})
        )

        client.post("/api/openai/v1/images/generations", json={}, headers={"Authorization": "Bearer k"})

        assert route.called

    @respx.mock
    def test_upstream_error_is_wrapped(self, client):
        upstream = {"error": {"message": "Incorrect API key provided", "type": "invalid_request_error"}}
        respx.post(f"{config.OPENAI_API_URL}/chat/completions").mock(
            return_value=httpx.Response(401, json=upstream)
        )

        response = client.post(
            "/api/openai/v1/chat/completions", json={}, headers={"Authorization": "Bearer bad"}
        )

        assert response.status_code == 401
        assert response.json() == {
            "error": {
                "message": "Incorrect API key provided",
                "type": "api_error",
                "details": upstream,
            }
        }

    @respx.mock
    def test_network_failure_is_500(self, client):
        respx.post(f"{config.OPENAI_API_URL}/chat/completions").mock(
            side_effect=httpx.ConnectError("connection refused")
        )

        response = client.post(
            "/api/openai/v1/chat/completions", json={}, headers={"Authorization": "Bearer k"}
        )

        assert response.status_code == 500
        assert response.json()["error"]["type"] == "api_error"
        assert "connection refused" in response.json()["error"]["message"]

    def test_other_methods_are_rejected(self, client):
        response = client.get("/api/openai/v1/models", headers={"Authorization": "Bearer k"})

        assert response.status_code == 405
        assert response.json() == {"error": {"message": "Method not allowed"}}

    def test_missing_authorization(self, client):
        with respx.mock(assert_all_called=False) as mock:
            route = mock.post(f"{config.OPENAI_API_URL}/chat/completions")
            response = client.post("/api/openai/v1/chat/completions", json={})

        assert response.status_code == 400
        assert response.json()["error"]["type"] == "validation_error"
        assert not route.called


class TestYandexRelay:
    @pytest.mark.parametrize(
        "path", ["/api/yandex/v1/completion", "/api/yandex/v1/images/generations"]
    )
    @pytest.mark.parametrize(
        "headers, message",
        [
            ({"x-folder-id": "b1gfolder"}, "Missing Authorization header"),
            ({"Authorization": "Api-Key ya-key"}, "Missing x-folder-id header"),
        ],
    )
    def test_missing_headers_rejected_before_outbound_call(self, client, path, headers, message):
        with respx.mock(assert_all_called=False) as mock:
            route = mock.route(host="llm.api.cloud.yandex.net")
            response = client.post(path, json={}, headers=headers)

        assert response.status_code == 400
        assert response.json() == {"error": {"message": message, "type": "validation_error"}}
        assert not route.called

    @respx.mock
    def test_completion_is_relayed_verbatim(self, client):
        body = {"result": {"alternatives": [{"status": "ALTERNATIVE_STATUS_FINAL"}]}}
        route = respx.post(config.YANDEX_COMPLETION_URL).mock(
            return_value=httpx.Response(200, json=body)
        )

        response = client.post("/api/yandex/v1/completion", json={"messages": []}, headers=YANDEX_HEADERS)

        assert response.status_code == 200
        assert response.json() == body
        sent = route.calls.last.request
        assert sent.headers["authorization"] == "Api-Key ya-key"
        assert sent.headers["x-folder-id"] == "b1gfolder"

    @respx.mock
    def test_completion_error_uses_provider_status(self, client):
        upstream = {"error": {"grpcCode": 7, "message": "Permission denied"}}
        respx.post(config.YANDEX_COMPLETION_URL).mock(return_value=httpx.Response(403, json=upstream))

        response = client.post("/api/yandex/v1/completion", json={}, headers=YANDEX_HEADERS)

        assert response.status_code == 403
        error = response.json()["error"]
        assert error["message"] == "Permission denied"
        assert error["type"] == "api_error"
        assert error["details"] == upstream

    @respx.mock
    def test_image_submission_returns_operation(self, client):
        respx.post(config.YANDEX_IMAGE_URL).mock(
            return_value=httpx.Response(200, json={"id": "op-1", "done": False})
        )

        response = client.post("/api/yandex/v1/images/generations", json={}, headers=YANDEX_HEADERS)

        assert response.json() == {"id": "op-1", "done": False}

    @respx.mock
    def test_operation_status_is_a_bare_get(self, client):
        route = respx.get(f"{config.YANDEX_OPERATIONS_URL}op-1").mock(
            return_value=httpx.Response(200, json={"id": "op-1", "done": True})
        )

        response = client.get("/api/yandex/v1/operations/op-1", headers=YANDEX_HEADERS)

        assert response.json()["done"] is True
        assert route.calls.last.request.content == b""

    def test_completion_rejects_get(self, client):
        response = client.get("/api/yandex/v1/completion", headers=YANDEX_HEADERS)

        assert response.status_code == 405


class TestErrorHandlers:
    @pytest.mark.parametrize(
        "path",
        [
            "/api/yandex/v1/completion",
            "/api/yandex/v1/images/generations",
            "/api/openai/v1/chat/completions",
            "/health",
        ],
    )
    def test_options_uses_error_envelope(self, client, path):
        response = client.options(path)

        assert response.status_code == 405
        assert response.json() == {"error": {"message": "Method not allowed"}}

    def test_unknown_path_uses_error_envelope(self, client):
        response = client.get("/api/unknown")

        assert response.status_code == 404
        assert response.json()["error"]["type"] == "api_error"

    def test_exception_outside_forward_is_500_envelope(self, monkeypatch):
        from bouquetai.api import http_api

        def broken(request):
            raise RuntimeError("header parsing exploded")

        monkeypatch.setattr(http_api, "yandex_headers", broken)
        client = TestClient(app, raise_server_exceptions=False)

        response = client.post("/api/yandex/v1/completion", json={}, headers=YANDEX_HEADERS)

        assert response.status_code == 500
        assert response.json() == {
            "error": {"message": "header parsing exploded", "type": "api_error"}
        }
