"""
Low-level HTTP dispatcher for the IAMDS API.

``ApiClient`` turns a ``RequestDescriptor`` into one HTTP call, sync or
async, built on httpx:
- Client identification and default headers
- Credentials from the configured auth provider, per required scopes
- Response deserialization into pydantic models
- Failure translation through a single exception-translator slot
- Cooperative cancellation

Calls are made at most once; retry policy belongs to the caller.
"""

import asyncio
import json
import logging
from typing import Any, Callable, Dict, Optional, Type, Union

import httpx
from pydantic import BaseModel

from iamds_client.auth import AuthProvider, auth_provider_from_config
from iamds_client.cancellation import CancellationToken
from iamds_client.config import Configuration
from iamds_client.exceptions import (
    ApiCallFailedError,
    ConnectionError as ClientConnectionError,
    IamdsClientError,
    MulticastHookUnsupportedError,
    NetworkError,
    RateLimitError,
    RequestCancelledError,
    TimeoutError as ClientTimeoutError,
    exception_from_response,
)
from iamds_client.models import IamdsModel
from iamds_client.request import RequestDescriptor, ResponseEnvelope
from iamds_client.utils import is_json_mime

logger = logging.getLogger(__name__)

SDK_VERSION = "1.0.0"

CLIENT_HEADER = "X-Avalara-Client"

SUPPORTED_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})

ExceptionTranslator = Callable[[str, ResponseEnvelope], Optional[Exception]]

# Marks an omitted keyword argument where None has its own meaning
UNSET: Any = object()


def status_code_translator(operation: str, envelope: ResponseEnvelope) -> Optional[Exception]:
    """
    Default translator: map a failed response to a ``DomainError`` subclass.

    Understands the API's ``{"error": {"code", "message", "details"}}`` body
    and falls back to the raw text.
    """
    if envelope.is_success:
        return None

    message = envelope.raw_content or f"HTTP {envelope.status_code}"
    error_code = None
    details: Dict[str, Any] = {}
    try:
        payload = json.loads(envelope.raw_content) if envelope.raw_content else None
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        error = payload.get("error") if isinstance(payload.get("error"), dict) else payload
        message = error.get("message") or error.get("detail") or message
        error_code = error.get("code")
        if error_code is not None:
            error_code = str(error_code)
        if isinstance(error.get("details"), dict):
            details = error["details"]
        elif error.get("details") is not None:
            details = {"details": error["details"]}

    if envelope.status_code == 429:
        retry_after = envelope.header("Retry-After")
        return RateLimitError(
            message,
            status_code=429,
            source_operation=operation,
            body=envelope.raw_content,
            error_code=error_code,
            details=details,
            retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
        )

    return exception_from_response(
        envelope.status_code,
        message,
        source_operation=operation,
        body=envelope.raw_content,
        error_code=error_code,
        details=details,
    )


class ApiClient:
    """
    Shared dispatcher used by every resource API.

    Example:
        ```python
        api_client = ApiClient(Configuration(environment="sandbox", access_token="..."))
        descriptor = RequestDescriptor("/tenants/{tenant-id}")
        descriptor.add_path_param("tenant-id", "t-1")
        envelope = api_client.call("GET", descriptor, Tenant, operation="GetTenant")
        ```
    """

    def __init__(
        self,
        configuration: Optional[Configuration] = None,
        *,
        auth_provider: Optional[AuthProvider] = UNSET,
        exception_translator: Optional[ExceptionTranslator] = UNSET,
        transport: Optional[httpx.BaseTransport] = None,
        async_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            configuration: Connection settings (defaults to the sandbox preset)
            auth_provider: Credential source; derived from the configuration
                when omitted, None disables authentication
            exception_translator: Failure hook; ``status_code_translator``
                when omitted, None leaves the slot empty
            transport: httpx transport for sync calls (tests pass a mock)
            async_transport: httpx transport for async calls; defaults to
                ``transport`` when it supports async
        """
        self.configuration = configuration or Configuration()
        self.auth_provider = (
            auth_provider_from_config(self.configuration)
            if auth_provider is UNSET
            else auth_provider
        )
        self._exception_translator: Optional[ExceptionTranslator] = (
            status_code_translator if exception_translator is UNSET else exception_translator
        )
        self._transport = transport
        if async_transport is None and isinstance(transport, httpx.AsyncBaseTransport):
            async_transport = transport
        self._async_transport = async_transport

        self._client: Optional[httpx.Client] = None
        self._async_client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return self.configuration.base_url

    # =========================================================================
    # Exception translator slot
    # =========================================================================

    @property
    def exception_translator(self) -> Optional[ExceptionTranslator]:
        return self._exception_translator

    @exception_translator.setter
    def exception_translator(self, translator: Optional[ExceptionTranslator]) -> None:
        if translator is None:
            self.clear_exception_translator()
        else:
            self.set_exception_translator(translator)

    def set_exception_translator(self, translator: ExceptionTranslator) -> None:
        """
        Install the failure hook.

        Raises:
            MulticastHookUnsupportedError: If a translator is already installed
        """
        if self._exception_translator is not None:
            raise MulticastHookUnsupportedError()
        self._exception_translator = translator

    def clear_exception_translator(self) -> None:
        self._exception_translator = None

    # =========================================================================
    # httpx client lifecycle
    # =========================================================================

    def _get_client(self) -> httpx.Client:
        """Get or create the underlying sync httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.configuration.timeout),
                transport=self._transport,
            )
        return self._client

    def _get_async_client(self) -> httpx.AsyncClient:
        """Get or create the underlying async httpx client."""
        if self._async_client is None or self._async_client.is_closed:
            self._async_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.configuration.timeout),
                transport=self._async_transport,
            )
        return self._async_client

    def close(self) -> None:
        """Close the sync httpx client."""
        if self._client and not self._client.is_closed:
            self._client.close()
        self._client = None

    async def aclose(self) -> None:
        """Close both httpx clients."""
        if self._async_client and not self._async_client.is_closed:
            await self._async_client.aclose()
        self._async_client = None
        self.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    # =========================================================================
    # Request assembly
    # =========================================================================

    @staticmethod
    def _check_method(method: str) -> str:
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")
        return method

    def _scopes(self, descriptor: RequestDescriptor) -> str:
        return self.configuration.required_scopes or descriptor.required_scopes

    def _build_headers(self, descriptor: RequestDescriptor) -> httpx.Headers:
        """Identification header, then configuration defaults, then call headers."""
        headers = httpx.Headers({CLIENT_HEADER: self.configuration.client_header(SDK_VERSION)})
        for name, value in self.configuration.default_headers.items():
            headers[name] = value
        for name, value in descriptor.headers.multi_items():
            headers[name] = value
        return headers

    @staticmethod
    def _body_kwargs(descriptor: RequestDescriptor, headers: httpx.Headers) -> Dict[str, Any]:
        body = descriptor.body
        if body is None:
            return {}
        if isinstance(body, IamdsModel):
            body = body.to_wire()
        elif isinstance(body, BaseModel):
            body = body.model_dump(mode="json", by_alias=True, exclude_none=True)
        content_type = headers.get("Content-Type")
        if isinstance(body, (bytes, str)) and not (content_type and is_json_mime(content_type)):
            return {"content": body}
        return {"json": body}

    @staticmethod
    def _raise_if_cancelled(token: Optional[CancellationToken], operation: str) -> None:
        if token is not None and token.is_cancelled:
            raise RequestCancelledError(operation=operation)

    def _build_request(
        self,
        client: Union[httpx.Client, httpx.AsyncClient],
        method: str,
        descriptor: RequestDescriptor,
        headers: httpx.Headers,
    ) -> httpx.Request:
        request = client.build_request(
            method,
            descriptor.url,
            headers=headers,
            **self._body_kwargs(descriptor, headers),
        )
        logger.debug(f"{method} {request.url}")
        return request

    # =========================================================================
    # Response handling
    # =========================================================================

    @staticmethod
    def _deserialize(response: httpx.Response, response_type: Optional[Type[Any]]) -> Any:
        if response_type is None or not response.content:
            return None
        content_type = response.headers.get("Content-Type", "")
        try:
            if response_type is str:
                if is_json_mime(content_type.split(";")[0].strip()):
                    data = response.json()
                    return data if isinstance(data, str) else response.text
                return response.text
            if isinstance(response_type, type) and issubclass(response_type, BaseModel):
                return response_type.model_validate(response.json())
            return response.json()
        except ValueError as e:
            raise IamdsClientError(
                f"Could not deserialize response as {getattr(response_type, '__name__', response_type)}: {e}",
                status_code=response.status_code,
            ) from e

    def _handle_response(
        self,
        response: httpx.Response,
        response_type: Optional[Type[Any]],
        operation: str,
        scopes: str,
    ) -> ResponseEnvelope:
        logger.debug(f"{operation} -> HTTP {response.status_code}")

        if response.is_success:
            return ResponseEnvelope.from_httpx(response, self._deserialize(response, response_type))

        if response.status_code in (401, 403) and self.auth_provider is not None:
            self.auth_provider.invalidate(scopes)

        envelope = ResponseEnvelope.from_httpx(response)
        translator = self._exception_translator
        if translator is not None:
            error = translator(operation, envelope)
            if error is not None:
                logger.warning(f"{operation} failed: {error}")
                raise error

        raise ApiCallFailedError(status_code=envelope.status_code, body=envelope.raw_content)

    # =========================================================================
    # Dispatch
    # =========================================================================

    def call(
        self,
        method: str,
        descriptor: RequestDescriptor,
        response_type: Optional[Type[Any]] = None,
        *,
        operation: Optional[str] = None,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> ResponseEnvelope:
        """
        Perform one HTTP call, blocking the current thread.

        Args:
            method: GET, POST, PUT, PATCH or DELETE
            descriptor: The request to send
            response_type: Model class, ``str``, or None for void operations
            operation: Operation name passed to the exception translator
            cancellation_token: Checked before sending and again when the
                response headers arrive

        Returns:
            ResponseEnvelope with the deserialized body

        Raises:
            RequestCancelledError: If the token fired
            ApiCallFailedError: On non-2xx responses (or a translated subclass)
            NetworkError: On transport failures
        """
        method = self._check_method(method)
        operation = operation or f"{method} {descriptor.path_template}"
        self._raise_if_cancelled(cancellation_token, operation)

        scopes = self._scopes(descriptor)
        headers = self._build_headers(descriptor)
        if self.auth_provider is not None:
            authorization = self.auth_provider.get_auth_header(scopes)
            if authorization:
                headers["Authorization"] = authorization

        client = self._get_client()
        request = self._build_request(client, method, descriptor, headers)
        self._raise_if_cancelled(cancellation_token, operation)

        try:
            response = client.send(request, stream=True)
            try:
                self._raise_if_cancelled(cancellation_token, operation)
                response.read()
            finally:
                response.close()
        except httpx.TimeoutException as e:
            raise ClientTimeoutError(f"Request timed out: {e}") from e
        except httpx.ConnectError as e:
            raise ClientConnectionError(f"Failed to connect to server: {e}") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Request failed: {e}") from e

        return self._handle_response(response, response_type, operation, scopes)

    async def acall(
        self,
        method: str,
        descriptor: RequestDescriptor,
        response_type: Optional[Type[Any]] = None,
        *,
        operation: Optional[str] = None,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> ResponseEnvelope:
        """
        Perform one HTTP call without blocking the event loop.

        Same contract as ``call``; a token fired while the request is in
        flight aborts it.
        """
        method = self._check_method(method)
        operation = operation or f"{method} {descriptor.path_template}"
        self._raise_if_cancelled(cancellation_token, operation)

        scopes = self._scopes(descriptor)
        headers = self._build_headers(descriptor)
        if self.auth_provider is not None:
            authorization = await self.auth_provider.aget_auth_header(scopes)
            if authorization:
                headers["Authorization"] = authorization

        client = self._get_async_client()
        request = self._build_request(client, method, descriptor, headers)
        self._raise_if_cancelled(cancellation_token, operation)

        task = asyncio.ensure_future(self._asend(client, request))
        unregister = None
        if cancellation_token is not None:
            loop = asyncio.get_running_loop()
            unregister = cancellation_token.register(
                lambda: loop.call_soon_threadsafe(task.cancel)
            )
        try:
            response = await task
        except asyncio.CancelledError:
            if cancellation_token is not None and cancellation_token.is_cancelled:
                raise RequestCancelledError(operation=operation) from None
            raise
        finally:
            if unregister is not None:
                unregister()

        return self._handle_response(response, response_type, operation, scopes)

    @staticmethod
    async def _asend(client: httpx.AsyncClient, request: httpx.Request) -> httpx.Response:
        try:
            return await client.send(request)
        except httpx.TimeoutException as e:
            raise ClientTimeoutError(f"Request timed out: {e}") from e
        except httpx.ConnectError as e:
            raise ClientConnectionError(f"Failed to connect to server: {e}") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Request failed: {e}") from e

    def __repr__(self) -> str:
        return f"<ApiClient base_url={self.base_url!r}>"
