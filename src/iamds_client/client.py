"""
Main IAMDS API client.

This module provides the IamdsClient class, the primary entry point for
the identity API. It owns one ApiClient and hands it to lazily created
resource API groups.
"""

from typing import Any, Dict, Optional, Type, TypeVar
import logging

import httpx

from iamds_client.api import (
    AppApi,
    BaseApi,
    EntitlementApi,
    FeatureApi,
    GrantApi,
    GroupApi,
    OrganizationApi,
    PermissionApi,
    ResourceApi,
    TenantApi,
)
from iamds_client.api_client import ApiClient, ExceptionTranslator, UNSET
from iamds_client.auth import AuthProvider
from iamds_client.config import Configuration

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseApi)


class IamdsClient:
    """
    Main client for the IAMDS API.

    Example usage:
        ```python
        config = Configuration(environment="sandbox", client_id="...", client_secret="...")
        with IamdsClient(config) as client:
            org = client.organizations.create_organizations(
                Organization(display_name="Acme")
            )
            users = client.tenants.list_tenant_users("t-1", top=50)
        ```

    Async:
        ```python
        async with IamdsClient(config) as client:
            tenant = await client.tenants.get_tenant_async("t-1")
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
        Initialize the IAMDS client.

        Args:
            configuration: Connection settings (defaults to the sandbox preset)
            auth_provider: Credential source; derived from the configuration
                when omitted
            exception_translator: Failure hook; the status code translator
                when omitted, None to receive plain ApiCallFailedError
            transport: httpx transport for sync calls
            async_transport: httpx transport for async calls
        """
        self._api_client = ApiClient(
            configuration,
            auth_provider=auth_provider,
            exception_translator=exception_translator,
            transport=transport,
            async_transport=async_transport,
        )

        # Resource API groups (lazy-loaded)
        self._apis: Dict[Type[BaseApi], BaseApi] = {}

        logger.debug(f"IamdsClient created for {self._api_client.base_url}")

    @property
    def api_client(self) -> ApiClient:
        """Get the underlying dispatcher for custom requests."""
        return self._api_client

    @property
    def configuration(self) -> Configuration:
        return self._api_client.configuration

    @property
    def base_url(self) -> str:
        return self._api_client.base_url

    def _get_api(self, api_class: Type[T]) -> T:
        if api_class not in self._apis:
            self._apis[api_class] = api_class(self._api_client)
        return self._apis[api_class]  # type: ignore[return-value]

    # =========================================================================
    # Resource APIs
    # =========================================================================

    @property
    def apps(self) -> AppApi:
        return self._get_api(AppApi)

    @property
    def entitlements(self) -> EntitlementApi:
        return self._get_api(EntitlementApi)

    @property
    def features(self) -> FeatureApi:
        return self._get_api(FeatureApi)

    @property
    def grants(self) -> GrantApi:
        return self._get_api(GrantApi)

    @property
    def groups(self) -> GroupApi:
        return self._get_api(GroupApi)

    @property
    def organizations(self) -> OrganizationApi:
        return self._get_api(OrganizationApi)

    @property
    def permissions(self) -> PermissionApi:
        return self._get_api(PermissionApi)

    @property
    def resources(self) -> ResourceApi:
        return self._get_api(ResourceApi)

    @property
    def tenants(self) -> TenantApi:
        return self._get_api(TenantApi)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Close the sync HTTP client."""
        self._api_client.close()

    async def aclose(self) -> None:
        """Close all HTTP clients."""
        await self._api_client.aclose()

    def __enter__(self) -> "IamdsClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    async def __aenter__(self) -> "IamdsClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"<IamdsClient base_url={self.base_url!r}>"
