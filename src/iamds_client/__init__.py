"""
IAMDS Client Library.

A typed sync/async HTTP client for the Avalara identity and access
management directory service (organizations, tenants, users, devices,
groups, grants, entitlements, apps).

Example usage:
    ```python
    from iamds_client import Configuration, IamdsClient, Organization

    config = Configuration(environment="sandbox", access_token="...")
    with IamdsClient(config) as client:
        org = client.organizations.create_organizations(Organization(display_name="Acme"))
        same = client.organizations.get_organization(org.id)
    ```
"""

__version__ = "1.0.0"

# Main client
from iamds_client.client import IamdsClient

# Dispatcher and per-call containers (for advanced usage)
from iamds_client.api_client import ApiClient, status_code_translator
from iamds_client.cancellation import CancellationToken
from iamds_client.config import Configuration, Environment
from iamds_client.operations import OPERATIONS, Operation, aexecute, execute
from iamds_client.request import RequestDescriptor, ResponseEnvelope

# Authentication
from iamds_client.auth import (
    ApiKeyAuthProvider,
    AuthProvider,
    BasicAuthProvider,
    OAuth2ClientCredentialsProvider,
    TokenAuthProvider,
)

# Resource APIs
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

# Models
from iamds_client.models import (
    App,
    AppList,
    Device,
    DeviceList,
    Entitlement,
    EntitlementList,
    Feature,
    FeatureList,
    Grant,
    GrantList,
    Group,
    GroupList,
    Organization,
    OrganizationList,
    PagedList,
    Permission,
    PermissionList,
    Reference,
    Resource,
    ResourceList,
    Tenant,
    TenantList,
    User,
    UserList,
)

# Exceptions
from iamds_client.exceptions import (
    # Base exception
    IamdsClientError,
    # Caller errors
    InvalidArgumentError,
    MissingPathParameterError,
    # Failed calls
    ApiCallFailedError,
    DomainError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ConflictError,
    PreconditionFailedError,
    RateLimitError,
    ServerError,
    ServiceUnavailableError,
    # Dispatch errors
    RequestCancelledError,
    MulticastHookUnsupportedError,
    NetworkError,
    TimeoutError,
    ConnectionError,
    # Utilities
    exception_from_response,
)

__all__ = [
    # Version
    "__version__",
    # Main client
    "IamdsClient",
    # Dispatcher
    "ApiClient",
    "status_code_translator",
    "CancellationToken",
    "Configuration",
    "Environment",
    "OPERATIONS",
    "Operation",
    "execute",
    "aexecute",
    "RequestDescriptor",
    "ResponseEnvelope",
    # Authentication
    "AuthProvider",
    "TokenAuthProvider",
    "BasicAuthProvider",
    "ApiKeyAuthProvider",
    "OAuth2ClientCredentialsProvider",
    # Resource APIs
    "BaseApi",
    "AppApi",
    "EntitlementApi",
    "FeatureApi",
    "GrantApi",
    "GroupApi",
    "OrganizationApi",
    "PermissionApi",
    "ResourceApi",
    "TenantApi",
    # Models
    "App",
    "AppList",
    "Device",
    "DeviceList",
    "Entitlement",
    "EntitlementList",
    "Feature",
    "FeatureList",
    "Grant",
    "GrantList",
    "Group",
    "GroupList",
    "Organization",
    "OrganizationList",
    "PagedList",
    "Permission",
    "PermissionList",
    "Reference",
    "Resource",
    "ResourceList",
    "Tenant",
    "TenantList",
    "User",
    "UserList",
    # Exceptions
    "IamdsClientError",
    "InvalidArgumentError",
    "MissingPathParameterError",
    "ApiCallFailedError",
    "DomainError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "PreconditionFailedError",
    "RateLimitError",
    "ServerError",
    "ServiceUnavailableError",
    "RequestCancelledError",
    "MulticastHookUnsupportedError",
    "NetworkError",
    "TimeoutError",
    "ConnectionError",
    "exception_from_response",
]
