import os
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from .main import app
from .security import get_api_keys, is_valid_api_key


@pytest.fixture
def api_key():
    return "test-api-key-12345"


@pytest.fixture
def client_with_api_key(api_key):
    with patch.dict(os.environ, {"API_KEY": api_key}):
        yield TestClient(app), api_key


@pytest.fixture
def client_without_configured_key():
    with patch.dict(os.environ, {}, clear=False):
        os.environ.pop("API_KEY", None)
        yield TestClient(app)


class TestRootEndpointAuth:
    def test_root_returns_401_without_api_key(self, client_with_api_key):
        client, _ = client_with_api_key
        response = client.get("/")
        assert response.status_code == 401

    def test_root_returns_401_with_invalid_api_key(self, client_with_api_key):
        client, _ = client_with_api_key
        response = client.get("/", headers={"X-API-Key": "invalid-key"})
        assert response.status_code == 401

    def test_root_returns_401_response_body(self, client_with_api_key):
        client, _ = client_with_api_key
        response = client.get("/")
        assert response.json() == {"detail": "Invalid or missing API key"}

    def test_root_returns_200_with_valid_api_key(self, client_with_api_key):
        client, api_key = client_with_api_key
        response = client.get("/", headers={"X-API-Key": api_key})
        assert response.status_code == 200
        assert response.json() == {"message": "Friend Recommendation API"}

    def test_every_key_rejected_when_none_configured(self, client_without_configured_key):
        response = client_without_configured_key.get("/", headers={"X-API-Key": ""})
        assert response.status_code == 401


class TestHealthEndpointNoAuth:
    def test_health_returns_200_without_api_key(self, client_with_api_key):
        client, _ = client_with_api_key
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_returns_ok_status(self, client_with_api_key):
        client, _ = client_with_api_key
        response = client.get("/health")
        assert response.json()["status"] == "ok"


class TestKeyRotation:
    def test_previous_key_still_accepted(self):
        with patch.dict(os.environ, {"API_KEY": "new-key", "API_KEYS": "old-key, older-key"}):
            client = TestClient(app)
            assert client.get("/", headers={"X-API-Key": "old-key"}).status_code == 200
            assert client.get("/", headers={"X-API-Key": "new-key"}).status_code == 200
            assert client.get("/", headers={"X-API-Key": "other"}).status_code == 401

    def test_blank_entries_are_ignored(self):
        assert is_valid_api_key("", ["", "x"]) is False
        with patch.dict(os.environ, {"API_KEY": "", "API_KEYS": " , "}):
            assert get_api_keys() == []
