# tests/conftest.py
import httpx
import pytest
import requests
from fastapi.testclient import TestClient
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from marketflow.config import Settings
from marketflow.main import create_app
from marketflow.services import Services
from sdk.client import StoreClient

TEST_BASE_URL = "http://testserver"


class TestClientAdapter(BaseAdapter):
    """Serve requests.Session traffic from an in-process TestClient."""

    def __init__(self, test_client: TestClient):
        super().__init__()
        self.test_client = test_client

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        r = self.test_client.request(
            request.method, request.url, content=request.body, headers=dict(request.headers)
        )
        response = requests.Response()
        response.status_code = r.status_code
        response.reason = r.reason_phrase
        response.headers = CaseInsensitiveDict(r.headers)
        response._content = r.content
        response.encoding = "utf-8"
        response.url = request.url
        response.request = request
        return response

    def close(self):
        pass


@pytest.fixture
def settings(tmp_path):
    return Settings(latency_scale=0, cart_path=tmp_path / "cart.json", log_level="WARNING")


@pytest.fixture
def services(settings):
    return Services.from_fixtures(settings)


@pytest.fixture
def empty_services(settings):
    return Services.empty(settings)


@pytest.fixture
def app(services, settings):
    return create_app(services, settings)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def store_client(app, client):
    sdk = StoreClient(base_url=TEST_BASE_URL, async_transport=httpx.ASGITransport(app=app))
    sdk.session.mount(TEST_BASE_URL, TestClientAdapter(client))
    return sdk
