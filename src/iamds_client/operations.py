"""
Declarative table of every IAMDS REST operation.

Each ``Operation`` row describes one endpoint: HTTP method, path template,
which arguments go to the path, query string and headers, the body, the
response model, content negotiation candidates and required scopes.
``execute`` / ``aexecute`` turn a row plus caller arguments into a call
through the ``ApiClient``.
"""

from dataclasses import dataclass
import re
from typing import Any, Dict, Optional, Tuple, Type, Union

from iamds_client.api_client import ApiClient
from iamds_client.cancellation import CancellationToken
from iamds_client.exceptions import InvalidArgumentError
from iamds_client.models import (
    App,
    AppList,
    DeviceList,
    Entitlement,
    EntitlementList,
    Feature,
    FeatureList,
    Grant,
    GrantList,
    Group,
    GroupList,
    IamdsModel,
    Organization,
    OrganizationList,
    Permission,
    PermissionList,
    Resource,
    ResourceList,
    Tenant,
    TenantList,
    UserList,
)
from iamds_client.request import RequestDescriptor, ResponseEnvelope

DEFAULT_SCOPES = "iam"

JSON = "application/json"
TEXT = "text/plain"


@dataclass(frozen=True)
class Parameter:
    """
    One operation argument.

    Attributes:
        name: Python keyword argument name (``tenant_id``)
        wire_name: Name on the wire (``tenant-id``, ``$top``, ``If-Match``)
        api_name: Name used by the API documentation (``tenantId``)
    """

    name: str
    wire_name: str
    api_name: str


@dataclass(frozen=True)
class Operation:
    name: str
    api: str
    method: str
    path: str
    summary: str = ""
    response_type: Optional[Type[Any]] = None
    path_params: Tuple[Parameter, ...] = ()
    query_params: Tuple[Parameter, ...] = ()
    header_params: Tuple[Parameter, ...] = ()
    body_param: Optional[str] = None
    body_type: Optional[Type[IamdsModel]] = None
    content_types: Tuple[str, ...] = ()
    accepts: Tuple[str, ...] = ()
    required_scopes: str = DEFAULT_SCOPES

    @property
    def qualified_name(self) -> str:
        return f"{self.api}->{self.name}"

    @property
    def method_name(self) -> str:
        """Python method name, e.g. ``ListTenantUsers`` -> ``list_tenant_users``."""
        return re.sub(r"(?<!^)(?=[A-Z])", "_", self.name).lower()

    @property
    def parameter_names(self) -> Tuple[str, ...]:
        names = [p.name for p in self.path_params + self.query_params + self.header_params]
        if self.body_param:
            names.append(self.body_param)
        return tuple(names)


# =============================================================================
# Parameter sets
# =============================================================================


def _path_param(wire_name: str) -> Parameter:
    """``tenant-id`` -> Parameter(tenant_id, tenant-id, tenantId)."""
    head, *rest = wire_name.split("-")
    return Parameter(
        name=wire_name.replace("-", "_"),
        wire_name=wire_name,
        api_name=head + "".join(part.capitalize() for part in rest),
    )


def _path_params(path: str) -> Tuple[Parameter, ...]:
    return tuple(_path_param(token) for token in re.findall(r"\{([^{}]+)\}", path))


FILTER = Parameter("filter", "$filter", "filter")
TOP = Parameter("top", "$top", "top")
SKIP = Parameter("skip", "$skip", "skip")
ORDER_BY = Parameter("order_by", "$orderBy", "orderBy")
COUNT = Parameter("count", "count", "count")
COUNT_ONLY = Parameter("count_only", "countOnly", "countOnly")

LIST_QUERY = (FILTER, TOP, SKIP, ORDER_BY, COUNT, COUNT_ONLY)
# ListGroups and ListTenants declare the count flags before $orderBy
LIST_QUERY_COUNT_FIRST = (FILTER, TOP, SKIP, COUNT, COUNT_ONLY, ORDER_BY)

AVALARA_VERSION = Parameter("avalara_version", "avalara-version", "avalaraVersion")
CORRELATION_ID = Parameter("x_correlation_id", "X-Correlation-Id", "xCorrelationId")
IF_MATCH = Parameter("if_match", "If-Match", "ifMatch")
IF_NONE_MATCH = Parameter("if_none_match", "If-None-Match", "ifNoneMatch")

COMMON_HEADERS = (AVALARA_VERSION, CORRELATION_ID)


# =============================================================================
# Row builders
# =============================================================================


def _create(api: str, name: str, path: str, model: Type[IamdsModel], summary: str) -> Operation:
    return Operation(
        name=name,
        api=api,
        method="POST",
        path=path,
        summary=summary,
        response_type=model,
        path_params=_path_params(path),
        header_params=COMMON_HEADERS,
        body_param=model.__name__.lower(),
        body_type=model,
        content_types=(JSON,),
        accepts=(JSON, TEXT),
    )


def _get(
    api: str,
    name: str,
    path: str,
    model: Type[Any],
    summary: str,
    headers: Tuple[Parameter, ...] = COMMON_HEADERS + (IF_NONE_MATCH,),
) -> Operation:
    return Operation(
        name=name,
        api=api,
        method="GET",
        path=path,
        summary=summary,
        response_type=model,
        path_params=_path_params(path),
        header_params=headers,
        accepts=(JSON, TEXT),
    )


def _list(
    api: str,
    name: str,
    path: str,
    model: Type[IamdsModel],
    summary: str,
    query: Tuple[Parameter, ...] = LIST_QUERY,
) -> Operation:
    return Operation(
        name=name,
        api=api,
        method="GET",
        path=path,
        summary=summary,
        response_type=model,
        path_params=_path_params(path),
        query_params=query,
        header_params=COMMON_HEADERS,
        accepts=(JSON, TEXT),
    )


def _update(
    api: str, name: str, method: str, path: str, model: Type[IamdsModel], summary: str
) -> Operation:
    return Operation(
        name=name,
        api=api,
        method=method,
        path=path,
        summary=summary,
        path_params=_path_params(path),
        header_params=COMMON_HEADERS + (IF_MATCH,),
        body_param=model.__name__.lower(),
        body_type=model,
        content_types=(JSON,),
        accepts=(TEXT,),
    )


def _delete(
    api: str,
    name: str,
    path: str,
    summary: str,
    headers: Tuple[Parameter, ...] = COMMON_HEADERS + (IF_MATCH,),
) -> Operation:
    return Operation(
        name=name,
        api=api,
        method="DELETE",
        path=path,
        summary=summary,
        path_params=_path_params(path),
        header_params=headers,
        accepts=(TEXT,),
    )


def _link(api: str, name: str, method: str, path: str, summary: str) -> Operation:
    """Membership operations: add (PUT) or remove (DELETE) one child reference."""
    return Operation(
        name=name,
        api=api,
        method=method,
        path=path,
        summary=summary,
        path_params=_path_params(path),
        header_params=COMMON_HEADERS,
        accepts=(TEXT,),
    )


# =============================================================================
# The table
# =============================================================================

_ROWS = (
    # AppApi
    _link("AppApi", "AddGrantToApp", "PUT", "/apps/{app-id}/grants/{grant-id}", "Add a grant to an app."),
    _create("AppApi", "CreateApp", "/apps", App, "Add an app."),
    Operation(
        name="CreateAppSecret",
        api="AppApi",
        method="POST",
        path="/apps/{app-id}/secret",
        summary="Create a new secret for the app.",
        response_type=str,
        path_params=_path_params("/apps/{app-id}/secret"),
        header_params=COMMON_HEADERS,
        accepts=(JSON, TEXT),
    ),
    _delete("AppApi", "DeleteApp", "/apps/{app-id}", "Delete an app by ID."),
    _get("AppApi", "GetApp", "/apps/{app-id}", App, "Get an app by ID."),
    _list("AppApi", "ListAppGrants", "/apps/{app-id}/grants", AppList, "List all grants for a given app."),
    _list("AppApi", "ListApps", "/apps", AppList, "List apps which the user has access to."),
    _update("AppApi", "PatchApp", "PATCH", "/apps/{app-id}", App, "Update only fields in the body for the app."),
    _link("AppApi", "RemoveGrantFromApp", "DELETE", "/apps/{app-id}/grants/{grant-id}", "Remove a grant from an app."),
    _update("AppApi", "ReplaceApp", "PUT", "/apps/{app-id}", App, "Update all fields in an app by ID."),
    # EntitlementApi
    _create("EntitlementApi", "CreateEntitlement", "/entitlements", Entitlement, "Create an entitlement."),
    _delete("EntitlementApi", "DeleteEntitlement", "/entitlements/{entitlement-id}", "Delete an entitlement."),
    _get("EntitlementApi", "GetEntitlement", "/entitlements/{entitlement-id}", Entitlement, "Get an entitlement."),
    _list("EntitlementApi", "ListEntitlements", "/entitlements", EntitlementList, "List all entitlements."),
    _update("EntitlementApi", "PatchEntitlement", "PATCH", "/entitlements/{entitlement-id}", Entitlement, "Update selected fields in an entitlement."),
    _update("EntitlementApi", "ReplaceEntitlement", "PUT", "/entitlements/{entitlement-id}", Entitlement, "Update all fields in an entitlement."),
    # FeatureApi
    _create("FeatureApi", "CreateFeature", "/features", Feature, "Create a feature."),
    _delete("FeatureApi", "DeleteFeature", "/features/{feature-id}", "Delete a feature."),
    _get("FeatureApi", "GetFeature", "/features/{feature-id}", Feature, "Get a feature."),
    _list("FeatureApi", "ListFeatureGrants", "/features/{feature-id}/grants", GrantList, "List all grants on a feature."),
    _list("FeatureApi", "ListFeatures", "/features", FeatureList, "Get all features which the user has access to."),
    _update("FeatureApi", "PatchFeature", "PATCH", "/features/{feature-id}", Feature, "Update the fields within the body on the feature."),
    _update("FeatureApi", "ReplaceFeature", "PUT", "/features/{feature-id}", Feature, "Update all fields on a feature."),
    # GrantApi
    _create("GrantApi", "CreateGrant", "/grants", Grant, "Create a grant."),
    _delete("GrantApi", "DeleteGrant", "/grants/{grant-id}", "Delete a grant."),
    _get("GrantApi", "GetGrant", "/grants/{grant-id}", Grant, "Retrieve a grant."),
    _list("GrantApi", "ListGrants", "/grants", GrantList, "Retrieve all grants the current user has access to."),
    _update("GrantApi", "PatchGrant", "PATCH", "/grants/{grant-id}", Grant, "Update only the fields within the body on the grant."),
    _update("GrantApi", "ReplaceGrant", "PUT", "/grants/{grant-id}", Grant, "Update all fields on a grant."),
    # GroupApi
    _link("GroupApi", "AddDeviceToGroup", "PUT", "/groups/{group-id}/devices/{device-id}", "Add a device to a group."),
    _link("GroupApi", "AddGrantToGroup", "PUT", "/groups/{group-id}/grants/{grant-id}", "Add a grant to a group."),
    _link("GroupApi", "AddUserToGroup", "PUT", "/groups/{group-id}/users/{user-id}", "Add a user to a group."),
    _create("GroupApi", "CreateGroup", "/groups", Group, "Create a group."),
    _delete("GroupApi", "DeleteGroup", "/groups/{group-id}", "Delete a group."),
    _get("GroupApi", "GetGroup", "/groups/{group-id}", Group, "Get a group by ID."),
    _list("GroupApi", "ListGroupDevices", "/groups/{group-id}/devices", DeviceList, "Get all devices in a group."),
    _list("GroupApi", "ListGroupGrants", "/groups/{group-id}/grants", GrantList, "Get all grants in a group."),
    _list("GroupApi", "ListGroupUsers", "/groups/{group-id}/users", UserList, "Get all users in a group."),
    _list("GroupApi", "ListGroups", "/groups", GroupList, "Get all groups.", query=LIST_QUERY_COUNT_FIRST),
    _update("GroupApi", "PatchGroup", "PATCH", "/groups/{group-id}", Group, "Update the fields in the message body on the group."),
    _link("GroupApi", "RemoveDeviceFromGroup", "DELETE", "/groups/{group-id}/devices/{device-id}", "Remove a device from a group."),
    _link("GroupApi", "RemoveGrantFromGroup", "DELETE", "/groups/{group-id}/grants/{grant-id}", "Delete a grant from a group."),
    _link("GroupApi", "RemoveUserFromGroup", "DELETE", "/groups/{group-id}/users/{user-id}", "Delete a user from a group."),
    _update("GroupApi", "ReplaceGroup", "PUT", "/groups/{group-id}", Group, "Update all fields on a group."),
    # OrganizationApi
    _create("OrganizationApi", "CreateOrganizations", "/organizations", Organization, "Create an organization."),
    _delete("OrganizationApi", "DeleteOrganization", "/organizations/{organization-id}", "Delete an organization."),
    _get("OrganizationApi", "GetOrganization", "/organizations/{organization-id}", Organization, "Get an organization."),
    _list("OrganizationApi", "ListOrganizationApps", "/organizations/{organization-id}/apps", AppList, "Get all apps within an organization."),
    _list("OrganizationApi", "ListOrganizationTenants", "/organizations/{organization-id}/tenants", TenantList, "Get all tenants within an organization."),
    _list("OrganizationApi", "ListOrganizationUsers", "/organizations/{organization-id}/users", UserList, "Get all users within an organization."),
    _list("OrganizationApi", "ListOrganizations", "/organizations", OrganizationList, "List all organizations which the user has access to."),
    _update("OrganizationApi", "PatchOrganization", "PATCH", "/organizations/{organization-id}", Organization, "Update the fields present in the message body on the organization."),
    _update("OrganizationApi", "ReplaceOrganization", "PUT", "/organizations/{organization-id}", Organization, "Update all fields on an organization."),
    # PermissionApi
    _create("PermissionApi", "CreatePermission", "/permissions", Permission, "Create a permission."),
    _delete("PermissionApi", "DeletePermission", "/permissions/{permission-id}", "Delete a permission."),
    _get("PermissionApi", "GetPermission", "/permissions/{permission-id}", Permission, "Retrieve a permission."),
    _list("PermissionApi", "ListPermissions", "/permissions", PermissionList, "Get all permissions which the user has access to."),
    _update("PermissionApi", "PatchPermission", "PATCH", "/permissions/{permission-id}", Permission, "Update the fields present in the message body on the permission."),
    _update("PermissionApi", "ReplacePermission", "PUT", "/permissions/{permission-id}", Permission, "Update all fields on a permission."),
    # ResourceApi
    _create("ResourceApi", "CreateResource", "/resources", Resource, "Create a resource."),
    _delete("ResourceApi", "DeleteResource", "/resources/{resource-id}", "Delete a resource.", headers=COMMON_HEADERS),
    _get("ResourceApi", "GetResource", "/resources/{resource-id}", Resource, "Retrieve a resource.", headers=COMMON_HEADERS + (IF_NONE_MATCH, IF_MATCH)),
    _list("ResourceApi", "ListResourcePermissions", "/resources/{resource-id}/permissions", PermissionList, "Get a list of all permissions on a resource."),
    _list("ResourceApi", "ListResources", "/resources", ResourceList, "Get all resources which the user has access to."),
    _update("ResourceApi", "PatchResource", "PATCH", "/resources/{resource-id}", Resource, "Update the passed in fields from the message on the resource."),
    _update("ResourceApi", "ReplaceResource", "PUT", "/resources/{resource-id}", Resource, "Update all fields on a resource."),
    # TenantApi
    _link("TenantApi", "AddDeviceToTenant", "PUT", "/tenants/{tenant-id}/devices/{device-id}", "Add a device to a tenant."),
    _link("TenantApi", "AddGrantToTenantUser", "PUT", "/tenants/{tenant-id}/users/{user-id}/grants/{grant-id}", "Add a grant to a user within a tenant."),
    _link("TenantApi", "AddUserToTenant", "PUT", "/tenants/{tenant-id}/users/{user-id}", "Add a user to a tenant."),
    _create("TenantApi", "CreateTenant", "/tenants", Tenant, "Add a tenant to the list of tenants."),
    _delete("TenantApi", "DeleteTenant", "/tenants/{tenant-id}", "Delete a tenant."),
    _get("TenantApi", "GetTenant", "/tenants/{tenant-id}", Tenant, "GET a tenant by ID."),
    _list("TenantApi", "ListTenantDevices", "/tenants/{tenant-id}/devices", DeviceList, "Retrieve all devices within a tenant."),
    _list("TenantApi", "ListTenantEntitlements", "/tenants/{tenant-id}/entitlements", EntitlementList, "Retrieve all entitlements within a tenant."),
    _list("TenantApi", "ListTenantGroups", "/tenants/{tenant-id}/groups", GroupList, "Retrieve all groups within a tenant."),
    _list("TenantApi", "ListTenantUserGrants", "/tenants/{tenant-id}/users/{user-id}/grants", GrantList, "Retrieve all grants of a user within a tenant."),
    _list("TenantApi", "ListTenantUserGroups", "/tenants/{tenant-id}/users/{user-id}/groups", GroupList, "List the groups a user belongs to within a specific tenant."),
    _list("TenantApi", "ListTenantUsers", "/tenants/{tenant-id}/users", UserList, "Retrieve all users within a tenant."),
    _list("TenantApi", "ListTenants", "/tenants", TenantList, "Get a list of all tenants.", query=LIST_QUERY_COUNT_FIRST),
    _update("TenantApi", "PatchTenant", "PATCH", "/tenants/{tenant-id}", Tenant, "Update specific fields in a tenant."),
    _link("TenantApi", "RemoveDeviceFromTenant", "DELETE", "/tenants/{tenant-id}/devices/{device-id}", "Remove a device from a tenant."),
    _link("TenantApi", "RemoveGrantFromTenantUser", "DELETE", "/tenants/{tenant-id}/users/{user-id}/grants/{grant-id}", "Remove a grant from a user within a tenant."),
    _link("TenantApi", "RemoveUserFromTenant", "DELETE", "/tenants/{tenant-id}/users/{user-id}", "Remove a user from a tenant."),
    _update("TenantApi", "ReplaceTenant", "PUT", "/tenants/{tenant-id}", Tenant, "Update a tenant by ID."),
)

OPERATIONS: Dict[str, Operation] = {row.name: row for row in _ROWS}


def get_operation(operation: Union[str, Operation]) -> Operation:
    if isinstance(operation, Operation):
        return operation
    try:
        return OPERATIONS[operation]
    except KeyError:
        raise KeyError(f"Unknown operation: {operation}") from None


def operations_for(api: str) -> Tuple[Operation, ...]:
    """All rows belonging to one API group, e.g. ``"TenantApi"``."""
    return tuple(row for row in _ROWS if row.api == api)


# =============================================================================
# Execution
# =============================================================================


def _bind_arguments(operation: Operation, args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Dict[str, Any]:
    """Map positional arguments onto path parameters then the body, and merge keywords."""
    positional = [param.name for param in operation.path_params]
    if operation.body_param:
        positional.append(operation.body_param)
    if len(args) > len(positional):
        raise TypeError(
            f"{operation.method_name}() takes at most {len(positional)} "
            f"positional arguments but {len(args)} were given"
        )
    values = dict(zip(positional, args))

    allowed = set(operation.parameter_names)
    for name, value in kwargs.items():
        if name not in allowed:
            raise TypeError(f"{operation.method_name}() got an unexpected keyword argument '{name}'")
        if name in values:
            raise TypeError(f"{operation.method_name}() got multiple values for argument '{name}'")
        values[name] = value
    return values


def build_descriptor(operation: Union[str, Operation], *args: Any, **kwargs: Any) -> RequestDescriptor:
    """
    Validate arguments and assemble the request for one operation.

    Raises:
        InvalidArgumentError: If a required path parameter is None or missing
        TypeError: On unknown or duplicated arguments
    """
    operation = get_operation(operation)
    values = _bind_arguments(operation, args, kwargs)

    for param in operation.path_params:
        if values.get(param.name) is None:
            raise InvalidArgumentError(param.api_name, operation.qualified_name)

    descriptor = RequestDescriptor(operation.path, required_scopes=operation.required_scopes)
    descriptor.negotiate(list(operation.content_types), list(operation.accepts))

    for param in operation.path_params:
        descriptor.add_path_param(param.wire_name, values[param.name])
    for param in operation.query_params:
        descriptor.add_query_param(param.wire_name, values.get(param.name))
    for param in operation.header_params:
        descriptor.set_header(param.wire_name, values.get(param.name))

    if operation.body_param:
        body = values.get(operation.body_param)
        if isinstance(body, dict) and operation.body_type is not None:
            body = operation.body_type.model_validate(body)
        descriptor.body = body

    return descriptor


def execute(
    api_client: ApiClient,
    operation: Union[str, Operation],
    *args: Any,
    cancellation_token: Optional[CancellationToken] = None,
    **kwargs: Any,
) -> ResponseEnvelope:
    """Run one operation synchronously and return the full envelope."""
    operation = get_operation(operation)
    descriptor = build_descriptor(operation, *args, **kwargs)
    return api_client.call(
        operation.method,
        descriptor,
        operation.response_type,
        operation=operation.name,
        cancellation_token=cancellation_token,
    )


async def aexecute(
    api_client: ApiClient,
    operation: Union[str, Operation],
    *args: Any,
    cancellation_token: Optional[CancellationToken] = None,
    **kwargs: Any,
) -> ResponseEnvelope:
    """Run one operation asynchronously and return the full envelope."""
    operation = get_operation(operation)
    descriptor = build_descriptor(operation, *args, **kwargs)
    return await api_client.acall(
        operation.method,
        descriptor,
        operation.response_type,
        operation=operation.name,
        cancellation_token=cancellation_token,
    )
