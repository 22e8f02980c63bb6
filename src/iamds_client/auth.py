"""
Authentication providers.

The ``ApiClient`` asks its provider for an ``Authorization`` header value
before every call, passing the operation's required scopes. Providers
that cache tokens drop them when the API answers 401/403 so the next call
authenticates again.
"""

from abc import ABC, abstractmethod
import asyncio
import base64
import logging
import threading
import weakref
from typing import Any, Dict, Optional

import httpx

from iamds_client.config import Configuration
from iamds_client.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class AuthProvider(ABC):
    """Abstract base class for authentication providers."""

    @abstractmethod
    def get_auth_header(self, scopes: str) -> Optional[str]:
        """Return the ``Authorization`` header value for ``scopes``, or None."""
        ...

    async def aget_auth_header(self, scopes: str) -> Optional[str]:
        """Async variant; providers that do no I/O can rely on the sync one."""
        return self.get_auth_header(scopes)

    def invalidate(self, scopes: str) -> None:
        """Forget any cached credential for ``scopes``."""


class TokenAuthProvider(AuthProvider):
    """Static bearer token."""

    def __init__(self, access_token: Optional[str] = None):
        self._access_token = access_token

    def get_auth_header(self, scopes: str) -> Optional[str]:
        if self._access_token:
            return f"Bearer {self._access_token}"
        return None

    def is_authenticated(self) -> bool:
        return self._access_token is not None

    def set_token(self, access_token: str) -> None:
        self._access_token = access_token

    def clear_token(self) -> None:
        self._access_token = None


class BasicAuthProvider(AuthProvider):
    """HTTP basic authentication."""

    def __init__(self, username: str, password: str):
        self._username = username or ""
        self._password = password or ""

    def get_auth_header(self, scopes: str) -> Optional[str]:
        raw = f"{self._username}:{self._password}".encode("utf-8")
        return f"Basic {base64.b64encode(raw).decode('ascii')}"


class ApiKeyAuthProvider(AuthProvider):
    """Pre-issued API key sent as the ``Authorization`` value, with optional prefix."""

    def __init__(self, api_key: str, prefix: Optional[str] = None):
        self._api_key = api_key
        self._prefix = prefix

    def get_auth_header(self, scopes: str) -> Optional[str]:
        if self._prefix:
            return f"{self._prefix} {self._api_key}"
        return self._api_key


class OAuth2ClientCredentialsProvider(AuthProvider):
    """
    OAuth2 client-credentials flow with one cached token per scope string.

    The token endpoint is either given directly or discovered from the
    identity server's ``.well-known/openid-configuration`` document.
    """

    GRANT_TYPE = "client_credentials"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        token_url: Optional[str] = None,
        identity_url: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
        async_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not client_id:
            raise ValueError("client_id is required for the client credentials flow")
        if not client_secret:
            raise ValueError("client_secret is required for the client credentials flow")
        if not token_url and not identity_url:
            raise ValueError("Either token_url or identity_url must be configured")

        self.client_id = client_id
        self._client_secret = client_secret
        self._token_url = token_url
        self._identity_url = identity_url.rstrip("/") if identity_url else None
        self._timeout = timeout
        self._transport = transport
        self._async_transport = async_transport

        self._tokens: Dict[str, str] = {}
        self._lock = threading.Lock()
        # asyncio locks are bound to the loop that first contends them
        self._async_locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock]" = (
            weakref.WeakKeyDictionary()
        )

    # =========================================================================
    # Token cache
    # =========================================================================

    def get_auth_header(self, scopes: str) -> Optional[str]:
        with self._lock:
            token = self._tokens.get(scopes)
            if not token:
                token = self._fetch_token(scopes)
                self._tokens[scopes] = token
        return f"Bearer {token}"

    async def aget_auth_header(self, scopes: str) -> Optional[str]:
        async with self._get_async_lock():
            with self._lock:
                token = self._tokens.get(scopes)
            if not token:
                token = await self._afetch_token(scopes)
                with self._lock:
                    self._tokens[scopes] = token
        return f"Bearer {token}"

    def _get_async_lock(self) -> asyncio.Lock:
        """Lock serializing token fetches on the running event loop."""
        loop = asyncio.get_running_loop()
        with self._lock:
            lock = self._async_locks.get(loop)
            if lock is None:
                lock = asyncio.Lock()
                self._async_locks[loop] = lock
        return lock

    def invalidate(self, scopes: str) -> None:
        with self._lock:
            if self._tokens.pop(scopes, None) is not None:
                logger.debug(f"Dropped cached token for scopes '{scopes}'")

    # =========================================================================
    # Token endpoint
    # =========================================================================

    @property
    def _discovery_url(self) -> str:
        return f"{self._identity_url}/.well-known/openid-configuration"

    def _token_request_data(self, scopes: str) -> Dict[str, str]:
        if not scopes:
            raise ValueError("Scope cannot be empty")
        return {
            "client_id": self.client_id,
            "client_secret": self._client_secret,
            "grant_type": self.GRANT_TYPE,
            "scope": scopes,
        }

    def _parse_token_response(self, response: httpx.Response) -> str:
        try:
            payload: Dict[str, Any] = response.json()
        except ValueError:
            payload = {}

        if response.is_success and payload.get("access_token"):
            logger.info(f"Obtained access token for client {self.client_id}")
            return payload["access_token"]

        detail = (
            payload.get("errorSummary")
            or payload.get("error_description")
            or payload.get("error")
            or response.text
            or f"HTTP {response.status_code}"
        )
        logger.warning(f"Token request failed: {detail}")
        raise AuthenticationError(f"Token request failed: {detail}", body=response.text)

    def _parse_discovery_response(self, response: httpx.Response) -> str:
        if not response.is_success:
            raise AuthenticationError(
                f"OpenID discovery failed at {self._discovery_url}",
                status_code=response.status_code,
                body=response.text,
            )
        token_url = response.json().get("token_endpoint")
        if not token_url:
            raise AuthenticationError("OpenID configuration has no token_endpoint")
        return token_url

    def _fetch_token(self, scopes: str) -> str:
        data = self._token_request_data(scopes)
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                if not self._token_url:
                    self._token_url = self._parse_discovery_response(
                        client.get(self._discovery_url)
                    )
                response = client.post(
                    self._token_url, data=data, headers={"Accept": "application/json"}
                )
        except httpx.HTTPError as e:
            raise AuthenticationError(f"Token request failed: {e}") from e
        return self._parse_token_response(response)

    async def _afetch_token(self, scopes: str) -> str:
        data = self._token_request_data(scopes)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._async_transport
            ) as client:
                if not self._token_url:
                    self._token_url = self._parse_discovery_response(
                        await client.get(self._discovery_url)
                    )
                response = await client.post(
                    self._token_url, data=data, headers={"Accept": "application/json"}
                )
        except httpx.HTTPError as e:
            raise AuthenticationError(f"Token request failed: {e}") from e
        return self._parse_token_response(response)


def auth_provider_from_config(config: Configuration) -> Optional[AuthProvider]:
    """
    Pick a provider from configured credentials.

    OAuth2 client credentials win over basic auth, which wins over a bearer
    token, which wins over an API key.
    """
    if config.client_id:
        return OAuth2ClientCredentialsProvider(
            config.client_id,
            config.client_secret,
            token_url=config.token_url,
            identity_url=config.identity_url,
            timeout=config.timeout,
        )
    if config.username or config.password:
        return BasicAuthProvider(config.username, config.password)
    if config.access_token:
        return TokenAuthProvider(config.access_token)
    if config.api_key:
        return ApiKeyAuthProvider(config.api_key, config.api_key_prefix)
    return None
