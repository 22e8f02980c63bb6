"""Pytest configuration and fixtures for iamds-client tests."""

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from iamds_client import ApiClient, Configuration, IamdsClient


BASE_URL = "https://iamds.test"


# ============================================================================
# Mock HTTP Responses
# ============================================================================


def json_response(
    status_code: int = 200,
    json_data: Optional[Any] = None,
    headers: Optional[Dict[str, str]] = None,
) -> httpx.Response:
    """Create an httpx.Response carrying a JSON body."""
    return httpx.Response(status_code, json=json_data, headers=headers)


def text_response(
    status_code: int = 200,
    text: str = "",
    headers: Optional[Dict[str, str]] = None,
) -> httpx.Response:
    """Create an httpx.Response carrying a plain-text body."""
    all_headers = {"Content-Type": "text/plain"}
    all_headers.update(headers or {})
    return httpx.Response(status_code, text=text, headers=all_headers)


class RecordingTransport(httpx.MockTransport):
    """
    MockTransport that remembers every request it served.

    The handler receives the request and returns an httpx.Response.
    """

    def __init__(self, handler: Callable[[httpx.Request], Any]):
        self.requests: List[httpx.Request] = []

        def _record(request: httpx.Request) -> Any:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last_request.content)


class FakeDirectory:
    """
    Minimal in-memory IAMDS server for organizations and tenants.

    Honors If-Match on tenant updates and answers 412 when it does not
    match the stored ETag.
    """

    def __init__(self):
        self.organizations: Dict[str, Dict[str, Any]] = {}
        self.tenants: Dict[str, Dict[str, Any]] = {}
        self._next_id = 1

    def _new_id(self, prefix: str) -> str:
        identifier = f"{prefix}-{self._next_id}"
        self._next_id += 1
        return identifier

    def __call__(self, request: httpx.Request) -> httpx.Response:
        parts = request.url.path.strip("/").split("/")
        collection = parts[0]
        store = self.organizations if collection == "organizations" else self.tenants

        if request.method == "POST" and len(parts) == 1:
            body = json.loads(request.content)
            body["id"] = self._new_id(collection[:-1])
            store[body["id"]] = body
            return json_response(201, body, headers={"ETag": '"v1"'})

        if request.method == "GET" and len(parts) == 1:
            items = list(store.values())
            return json_response(200, {"@recordsetCount": len(items), "items": items})

        identifier = parts[1]
        if identifier not in store:
            return json_response(404, {"error": {"code": "NotFound", "message": f"{identifier} not found"}})

        if request.method == "GET":
            return json_response(200, store[identifier], headers={"ETag": '"v1"'})
        if request.method in ("PATCH", "PUT"):
            if request.headers.get("If-Match") != '"v1"':
                return json_response(412, {"error": {"code": "PreconditionFailed", "message": "ETag mismatch"}})
            store[identifier].update(json.loads(request.content))
            return httpx.Response(204)
        if request.method == "DELETE":
            del store[identifier]
            return httpx.Response(204)
        return httpx.Response(405)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def base_url():
    """Default base URL for testing."""
    return BASE_URL


@pytest.fixture
def config(base_url):
    """Configuration pointing at the test host with a static bearer token."""
    return Configuration(
        environment="other",
        base_url=base_url,
        access_token="test-token",
        app_name="tests",
        app_version="0.1",
        machine_name="test-host",
    )


@pytest.fixture
def make_api_client(config):
    """Factory: ApiClient whose transport is served by ``handler``."""
    clients: List[ApiClient] = []

    def _make(handler: Callable[[httpx.Request], Any], **kwargs: Any):
        transport = RecordingTransport(handler)
        api_client = ApiClient(kwargs.pop("configuration", config), transport=transport, **kwargs)
        clients.append(api_client)
        return api_client, transport

    yield _make
    for api_client in clients:
        api_client.close()


@pytest.fixture
def directory():
    """Fresh in-memory directory server."""
    return FakeDirectory()


@pytest.fixture
def directory_transport(directory):
    """Recording transport served by the in-memory directory."""
    return RecordingTransport(directory)


@pytest.fixture
def iamds(config, directory_transport):
    """IamdsClient wired to the in-memory directory server."""
    client = IamdsClient(config, transport=directory_transport)
    yield client
    client.close()
