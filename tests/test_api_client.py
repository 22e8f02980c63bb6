"""Tests for the ApiClient dispatcher."""

import asyncio
from unittest.mock import MagicMock

import httpx
import pytest

from conftest import json_response, text_response
from iamds_client.api_client import CLIENT_HEADER, SDK_VERSION, ApiClient, status_code_translator
from iamds_client.auth import AuthProvider
from iamds_client.cancellation import CancellationToken
from iamds_client.config import Configuration
from iamds_client.exceptions import (
    ApiCallFailedError,
    ConnectionError as ClientConnectionError,
    DomainError,
    IamdsClientError,
    MulticastHookUnsupportedError,
    NotFoundError,
    PreconditionFailedError,
    RateLimitError,
    RequestCancelledError,
    ServerError,
    TimeoutError as ClientTimeoutError,
)
from iamds_client.models import Organization, Tenant
from iamds_client.operations import execute
from iamds_client.request import RequestDescriptor, ResponseEnvelope


def tenant_descriptor(tenant_id: str = "t-1") -> RequestDescriptor:
    descriptor = RequestDescriptor("/tenants/{tenant-id}", required_scopes="iam")
    descriptor.add_path_param("tenant-id", tenant_id)
    return descriptor


class TestRequestHeaders:
    """Tests for headers sent with every call."""

    def test_client_identification_and_auth(self, make_api_client):
        """Test the identification header and bearer token."""
        api_client, transport = make_api_client(lambda request: json_response(200, {"id": "t-1"}))

        api_client.call("GET", tenant_descriptor(), Tenant, operation="GetTenant")

        request = transport.last_request
        assert request.headers[CLIENT_HEADER] == f"tests; 0.1; PythonRestClient; {SDK_VERSION}; test-host"
        assert request.headers["Authorization"] == "Bearer test-token"
        assert str(request.url) == "https://iamds.test/tenants/t-1"

    def test_default_headers_and_overrides(self, make_api_client, base_url):
        """Test that call headers win over configured defaults."""
        config = Configuration(
            environment="other",
            base_url=base_url,
            default_headers={"X-Team": "identity", "X-Correlation-Id": "default"},
        )
        api_client, transport = make_api_client(
            lambda request: httpx.Response(204), configuration=config
        )
        descriptor = tenant_descriptor()
        descriptor.set_header("X-Correlation-Id", "call-1")

        api_client.call("DELETE", descriptor)

        request = transport.last_request
        assert request.headers["X-Team"] == "identity"
        assert request.headers.get_list("X-Correlation-Id") == ["call-1"]
        assert "Authorization" not in request.headers

    def test_escaped_path_reaches_the_wire(self, make_api_client):
        """Test that an escaped slash stays escaped."""
        api_client, transport = make_api_client(lambda request: httpx.Response(204))

        api_client.call("DELETE", tenant_descriptor("a/b"))

        assert transport.last_request.url.raw_path == b"/tenants/a%2Fb"

    def test_paging_query_reaches_the_wire(self, make_api_client):
        """Test that listing parameters are sent exactly as built."""
        api_client, transport = make_api_client(lambda request: json_response(200, {"items": []}))

        execute(api_client, "ListTenants", top="10", skip="5")

        assert transport.last_request.url.query == b"$top=10&$skip=5"

    def test_correlation_id_is_echoed(self, make_api_client):
        """Test reading the server's correlation id from the envelope."""
        api_client, transport = make_api_client(
            lambda request: httpx.Response(
                204, headers={"X-Correlation-Id": request.headers["X-Correlation-Id"]}
            )
        )

        envelope = execute(api_client, "DeleteTenant", "t-1", x_correlation_id="corr-42")

        assert transport.last_request.headers["X-Correlation-Id"] == "corr-42"
        assert envelope.correlation_id == "corr-42"

    def test_unsupported_method(self, make_api_client):
        """Test that only the five REST verbs are accepted."""
        api_client, transport = make_api_client(lambda request: httpx.Response(204))

        with pytest.raises(ValueError):
            api_client.call("HEAD", tenant_descriptor())
        assert transport.requests == []


class TestBodies:
    """Tests for request and response body handling."""

    def test_model_body_uses_wire_names(self, make_api_client):
        """Test that model bodies are sent camelCase without unset fields."""
        api_client, transport = make_api_client(
            lambda request: json_response(201, {"id": "org-1", "displayName": "Acme"})
        )
        descriptor = RequestDescriptor("/organizations")
        descriptor.negotiate(["application/json"], ["application/json", "text/plain"])
        descriptor.body = Organization(display_name="Acme")

        envelope = api_client.call("POST", descriptor, Organization)

        assert transport.last_json() == {"displayName": "Acme"}
        assert transport.last_request.headers["Content-Type"] == "application/json"
        assert envelope.status_code == 201
        assert envelope.data.id == "org-1"
        assert envelope.data.display_name == "Acme"

    def test_empty_body_gives_none(self, make_api_client):
        """Test that an empty response body deserializes to None."""
        api_client, _ = make_api_client(lambda request: httpx.Response(200))

        envelope = api_client.call("GET", tenant_descriptor(), Tenant)

        assert envelope.data is None
        assert envelope.raw_content == ""

    def test_void_operation_ignores_body(self, make_api_client):
        """Test that no response type means no deserialization."""
        api_client, _ = make_api_client(lambda request: text_response(200, "done"))

        envelope = api_client.call("DELETE", tenant_descriptor())

        assert envelope.data is None
        assert envelope.raw_content == "done"

    def test_text_response(self, make_api_client):
        """Test plain-text responses for str operations."""
        api_client, _ = make_api_client(lambda request: text_response(200, "s3cret"))

        envelope = api_client.call("POST", RequestDescriptor("/apps/a/secret"), str)

        assert envelope.data == "s3cret"

    def test_json_string_response(self, make_api_client):
        """Test that a JSON-encoded string is unwrapped."""
        api_client, _ = make_api_client(lambda request: json_response(200, "s3cret"))

        envelope = api_client.call("POST", RequestDescriptor("/apps/a/secret"), str)

        assert envelope.data == "s3cret"

    def test_undecodable_body_raises(self, make_api_client):
        """Test that a malformed JSON body is reported."""
        api_client, _ = make_api_client(
            lambda request: httpx.Response(
                200, content=b"{not json", headers={"Content-Type": "application/json"}
            )
        )

        with pytest.raises(IamdsClientError, match="Could not deserialize"):
            api_client.call("GET", tenant_descriptor(), Tenant)


class TestExceptionTranslation:
    """Tests for failure handling and the translator slot."""

    def test_default_translator_maps_status(self, make_api_client):
        """Test that the default translator produces domain errors."""
        api_client, _ = make_api_client(
            lambda request: json_response(
                404, {"error": {"code": "NotFound", "message": "No such tenant"}}
            )
        )

        with pytest.raises(NotFoundError) as exc_info:
            api_client.call("GET", tenant_descriptor(), Tenant, operation="GetTenant")

        error = exc_info.value
        assert error.status_code == 404
        assert error.error_code == "NotFound"
        assert error.message == "No such tenant"
        assert error.source_operation == "GetTenant"
        assert isinstance(error, ApiCallFailedError)

    def test_precondition_failed(self, make_api_client):
        """Test the 412 mapping."""
        api_client, _ = make_api_client(lambda request: text_response(412, "etag mismatch"))

        with pytest.raises(PreconditionFailedError) as exc_info:
            api_client.call("PATCH", tenant_descriptor(), operation="PatchTenant")

        assert exc_info.value.message == "etag mismatch"

    def test_rate_limit_retry_after(self, make_api_client):
        """Test that Retry-After is surfaced."""
        api_client, _ = make_api_client(
            lambda request: json_response(429, {"message": "slow down"}, headers={"Retry-After": "30"})
        )

        with pytest.raises(RateLimitError) as exc_info:
            api_client.call("GET", tenant_descriptor())

        assert exc_info.value.retry_after == 30

    def test_unknown_server_status(self, make_api_client):
        """Test that unmapped 5xx codes become ServerError."""
        api_client, _ = make_api_client(lambda request: httpx.Response(599))

        with pytest.raises(ServerError):
            api_client.call("GET", tenant_descriptor())

    def test_empty_slot_raises_api_call_failed(self, make_api_client):
        """Test the untranslated failure."""
        api_client, _ = make_api_client(
            lambda request: text_response(404, "missing"), exception_translator=None
        )

        with pytest.raises(ApiCallFailedError) as exc_info:
            api_client.call("GET", tenant_descriptor())

        assert type(exc_info.value) is ApiCallFailedError
        assert exc_info.value.status_code == 404
        assert exc_info.value.body == "missing"

    def test_translator_returning_none_falls_back(self, make_api_client):
        """Test that a declining translator leaves the generic error."""
        api_client, _ = make_api_client(
            lambda request: httpx.Response(409), exception_translator=lambda op, env: None
        )

        with pytest.raises(ApiCallFailedError) as exc_info:
            api_client.call("GET", tenant_descriptor())

        assert not isinstance(exc_info.value, DomainError)

    def test_custom_translator_receives_envelope(self, make_api_client):
        """Test the translator's inputs."""
        seen = {}

        class Gone(Exception):
            pass

        def translator(operation: str, envelope: ResponseEnvelope):
            seen["operation"] = operation
            seen["status"] = envelope.status_code
            return Gone(envelope.raw_content)

        api_client, _ = make_api_client(
            lambda request: text_response(410, "gone"), exception_translator=translator
        )

        with pytest.raises(Gone):
            api_client.call("GET", tenant_descriptor(), operation="GetTenant")

        assert seen == {"operation": "GetTenant", "status": 410}

    def test_second_translator_is_rejected(self, make_api_client):
        """Test that the slot holds one translator."""
        api_client, _ = make_api_client(lambda request: httpx.Response(204))

        with pytest.raises(MulticastHookUnsupportedError):
            api_client.set_exception_translator(lambda op, env: None)
        with pytest.raises(MulticastHookUnsupportedError):
            api_client.exception_translator = lambda op, env: None

        assert api_client.exception_translator is status_code_translator

    def test_clear_then_install(self, make_api_client):
        """Test replacing the translator after clearing it."""
        api_client, _ = make_api_client(lambda request: httpx.Response(204))
        replacement = MagicMock(return_value=None)

        api_client.exception_translator = None
        api_client.set_exception_translator(replacement)

        assert api_client.exception_translator is replacement

    def test_translator_not_called_on_success(self, make_api_client):
        """Test that successful calls skip the translator."""
        translator = MagicMock(return_value=None)
        api_client, _ = make_api_client(
            lambda request: httpx.Response(204), exception_translator=translator
        )

        api_client.call("DELETE", tenant_descriptor())

        translator.assert_not_called()


class TestAuthInteraction:
    """Tests for scope handling and credential invalidation."""

    def make_provider(self) -> MagicMock:
        provider = MagicMock(spec=AuthProvider)
        provider.get_auth_header.return_value = "Bearer cached"
        return provider

    def test_unauthorized_invalidates_credentials(self, make_api_client):
        """Test that 401 drops the cached token without retrying."""
        provider = self.make_provider()
        api_client, transport = make_api_client(
            lambda request: httpx.Response(401), auth_provider=provider
        )

        with pytest.raises(ApiCallFailedError):
            api_client.call("GET", tenant_descriptor())

        provider.get_auth_header.assert_called_once_with("iam")
        provider.invalidate.assert_called_once_with("iam")
        assert len(transport.requests) == 1

    def test_configured_scopes_override(self, make_api_client, base_url):
        """Test that configured scopes replace the operation's scopes."""
        provider = self.make_provider()
        config = Configuration(environment="other", base_url=base_url, required_scopes="iam tenants")
        api_client, transport = make_api_client(
            lambda request: httpx.Response(204), auth_provider=provider, configuration=config
        )

        api_client.call("DELETE", tenant_descriptor())

        provider.get_auth_header.assert_called_once_with("iam tenants")
        assert transport.last_request.headers["Authorization"] == "Bearer cached"


class TestTransportFailures:
    """Tests for network-level errors."""

    def test_connect_error(self, make_api_client):
        """Test that connection failures are wrapped."""

        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        api_client, _ = make_api_client(handler)

        with pytest.raises(ClientConnectionError):
            api_client.call("GET", tenant_descriptor())

    def test_timeout(self, make_api_client):
        """Test that timeouts are wrapped."""

        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        api_client, _ = make_api_client(handler)

        with pytest.raises(ClientTimeoutError):
            api_client.call("GET", tenant_descriptor())


class TestCancellation:
    """Tests for cooperative cancellation."""

    def test_cancelled_before_send(self, make_api_client):
        """Test that a fired token prevents any I/O."""
        api_client, transport = make_api_client(lambda request: httpx.Response(204))
        token = CancellationToken()
        token.cancel()

        with pytest.raises(RequestCancelledError):
            api_client.call("GET", tenant_descriptor(), cancellation_token=token)

        assert transport.requests == []

    def test_cancelled_while_in_flight(self, make_api_client):
        """Test that a token fired after sending discards the response."""
        token = CancellationToken()

        def handler(request):
            token.cancel()
            return json_response(200, {"id": "t-1"})

        api_client, transport = make_api_client(handler)
        envelope = None

        with pytest.raises(RequestCancelledError) as exc_info:
            envelope = api_client.call(
                "GET", tenant_descriptor(), Tenant, operation="GetTenant", cancellation_token=token
            )

        assert envelope is None
        assert exc_info.value.operation == "GetTenant"
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_async_cancelled_before_send(self, make_api_client):
        """Test the async path with a fired token."""
        api_client, transport = make_api_client(lambda request: httpx.Response(204))
        token = CancellationToken()
        token.cancel()

        with pytest.raises(RequestCancelledError):
            await api_client.acall("GET", tenant_descriptor(), cancellation_token=token)

        assert transport.requests == []
        await api_client.aclose()

    @pytest.mark.asyncio
    async def test_async_cancelled_in_flight(self, make_api_client):
        """Test that firing the token aborts a pending call."""
        started = asyncio.Event()

        async def handler(request):
            started.set()
            await asyncio.sleep(30)
            return httpx.Response(204)

        api_client, _ = make_api_client(handler)
        token = CancellationToken()

        task = asyncio.ensure_future(
            api_client.acall("GET", tenant_descriptor(), cancellation_token=token)
        )
        await asyncio.wait_for(started.wait(), timeout=5)
        token.cancel()

        with pytest.raises(RequestCancelledError):
            await asyncio.wait_for(task, timeout=5)
        await api_client.aclose()

    @pytest.mark.asyncio
    async def test_token_only_affects_its_call(self, make_api_client):
        """Test that other calls proceed."""
        api_client, transport = make_api_client(lambda request: json_response(200, {"id": "t-2"}))
        token = CancellationToken()
        token.cancel()

        with pytest.raises(RequestCancelledError):
            await api_client.acall("GET", tenant_descriptor("t-1"), Tenant, cancellation_token=token)
        envelope = await api_client.acall("GET", tenant_descriptor("t-2"), Tenant)

        assert envelope.data.id == "t-2"
        assert len(transport.requests) == 1
        await api_client.aclose()


class TestLifecycle:
    """Tests for client lifecycle management."""

    def test_context_manager_closes(self, make_api_client):
        """Test that leaving the context closes the httpx client."""
        api_client, _ = make_api_client(lambda request: httpx.Response(204))

        with api_client:
            api_client.call("DELETE", tenant_descriptor())
            inner = api_client._client
            assert not inner.is_closed

        assert inner.is_closed
        assert api_client._client is None

    @pytest.mark.asyncio
    async def test_async_context_manager_closes(self, make_api_client):
        """Test async context manager usage."""
        api_client, _ = make_api_client(lambda request: httpx.Response(204))

        async with api_client:
            await api_client.acall("DELETE", tenant_descriptor())
            inner = api_client._async_client

        assert inner.is_closed

    def test_default_configuration(self):
        """Test that an ApiClient without arguments targets the sandbox."""
        api_client = ApiClient()
        assert api_client.base_url == "https://api.sbx.avalara.com"
        assert api_client.auth_provider is None
        assert repr(api_client) == "<ApiClient base_url='https://api.sbx.avalara.com'>"
