"""
Resource models for the IAMDS API.

Fields use snake_case in Python and camelCase on the wire. Unknown fields
returned by the server are kept so newer API versions round-trip.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class IamdsModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_wire(self) -> dict:
        """Serialize for a request body: camelCase keys, unset fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# Shared building blocks
# =============================================================================


class Reference(IamdsModel):
    """Pointer to another resource."""

    identifier: str
    display_name: Optional[str] = None
    location: Optional[str] = None


class InstanceMeta(IamdsModel):
    created: Optional[datetime] = None
    created_by: Optional[str] = None
    last_modified: Optional[datetime] = None
    modified_by: Optional[str] = None
    location: Optional[str] = None
    version: Optional[str] = None


class Aspect(IamdsModel):
    namespace: Optional[str] = None
    identifier: Optional[str] = None
    display_name: Optional[str] = None
    location: Optional[str] = None


class Tag(IamdsModel):
    name: str
    value: Optional[str] = None


class Entity(IamdsModel):
    """Fields every top-level resource carries."""

    id: Optional[str] = None
    meta: Optional[InstanceMeta] = None
    aspects: Optional[List[Aspect]] = None
    tags: Optional[List[Tag]] = None


# =============================================================================
# Contacts
# =============================================================================


class ContactSource(str, Enum):
    referenced = "referenced"
    managed = "managed"


class PhoneType(str, Enum):
    work = "work"
    home = "home"
    mobile = "mobile"
    fax = "fax"
    other = "other"


class ContactName(IamdsModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class ContactEmails(IamdsModel):
    email_id: str
    is_primary: Optional[bool] = None


class ContactPhoneNumbers(IamdsModel):
    phone_type: Optional[PhoneType] = None
    number: str
    is_primary: Optional[bool] = None


class Contact(Entity):
    source: ContactSource
    user: Optional[Reference] = None
    name: Optional[ContactName] = None
    contact_type: Optional[str] = None
    emails: Optional[List[ContactEmails]] = None
    phone_numbers: Optional[List[ContactPhoneNumbers]] = None


# =============================================================================
# Directory resources
# =============================================================================


class Organization(Entity):
    display_name: Optional[str] = None
    parent: Optional[Reference] = None
    contacts: Optional[List[Reference]] = None


class Tenant(Entity):
    display_name: Optional[str] = None
    organization: Optional[Reference] = None


class User(Entity):
    external_id: Optional[str] = None
    user_name: Optional[str] = None
    organization: Optional[Reference] = None
    name: Optional[Any] = None
    display_name: Optional[str] = None
    nick_name: Optional[str] = None
    profile_url: Optional[str] = None
    title: Optional[str] = None
    user_type: Optional[str] = None
    preferred_language: Optional[str] = None
    locale: Optional[str] = None
    timezone: Optional[str] = None
    active: Optional[bool] = None
    password: Optional[str] = None
    emails: Optional[List[Any]] = None
    phone_numbers: Optional[List[Any]] = None
    addresses: Optional[List[Any]] = None
    default_tenant: Optional[Reference] = None
    custom_claims: Optional[List[Any]] = None


class Device(Entity):
    display_name: Optional[str] = None
    tenant: Optional[Reference] = None
    identity: Optional[str] = None
    active: Optional[bool] = None
    grants: Optional[List[Reference]] = None
    groups: Optional[List[Reference]] = None


class Group(Entity):
    external_id: Optional[str] = None
    display_name: Optional[str] = None
    tenant: Optional[Reference] = None
    members: Optional[List[Any]] = None
    grants: Optional[List[Reference]] = None


# =============================================================================
# Authorization resources
# =============================================================================


class AppType(str, Enum):
    spa = "spa"
    web = "web"
    native = "native"


class RoleType(str, Enum):
    system = "System"
    custom = "Custom"


class System(Entity):
    display_name: Optional[str] = None
    description: Optional[str] = None
    namespace: Optional[str] = None
    scopes: Optional[List[Any]] = None


class Resource(Entity):
    namespace: Optional[str] = None
    display_name: Optional[str] = None
    system: Optional[Reference] = None
    properties: Optional[List[str]] = None


class Permission(Entity):
    display_name: Optional[str] = None
    description: Optional[str] = None
    system: Optional[Reference] = None
    resource: Optional[Reference] = None
    actions: Optional[List[str]] = None


class Role(Entity):
    type: Optional[RoleType] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    system: Optional[Reference] = None
    permissions: Optional[List[str]] = None


class Grant(Entity):
    display_name: Optional[str] = None
    description: Optional[str] = None
    system: Optional[Reference] = None
    permissions: Optional[List[Reference]] = None
    roles: Optional[List[Reference]] = None


class Feature(Entity):
    display_name: Optional[str] = None
    description: Optional[str] = None
    system: Optional[Reference] = None
    grants: Optional[List[Reference]] = None


class Entitlement(Entity):
    display_name: Optional[str] = None
    system: Optional[Reference] = None
    tenant: Optional[Reference] = None
    active: Optional[bool] = None
    features: Optional[List[Reference]] = None
    custom_grants: Optional[List[Reference]] = None


class App(Entity):
    type: Optional[AppType] = None
    display_name: Optional[str] = None
    organization: Optional[Reference] = None
    is_tenant_agnostic: Optional[bool] = None
    is_org_agnostic: Optional[bool] = None
    tenants: Optional[List[Any]] = None
    client_id: Optional[str] = None
    redirect_uris: Optional[List[str]] = None
    grants: Optional[List[Reference]] = None


# =============================================================================
# List envelopes
# =============================================================================

T = TypeVar("T", bound=IamdsModel)


class PagedList(IamdsModel, Generic[T]):
    """
    One page of a listing call.

    ``recordset_count`` is only filled when the call passed ``count=True``
    or ``count_only=True``.
    """

    recordset_count: Optional[int] = Field(None, alias="@recordsetCount")
    next_link: Optional[str] = Field(None, alias="@nextLink")
    page_key: Optional[str] = None
    items: List[T] = Field(default_factory=list)


class OrganizationList(PagedList[Organization]):
    pass


class TenantList(PagedList[Tenant]):
    pass


class UserList(PagedList[User]):
    pass


class DeviceList(PagedList[Device]):
    pass


class GroupList(PagedList[Group]):
    pass


class GrantList(PagedList[Grant]):
    pass


class EntitlementList(PagedList[Entitlement]):
    pass


class FeatureList(PagedList[Feature]):
    pass


class PermissionList(PagedList[Permission]):
    pass


class ResourceList(PagedList[Resource]):
    pass


class AppList(PagedList[App]):
    pass


__all__ = [
    "IamdsModel",
    "Reference",
    "InstanceMeta",
    "Aspect",
    "Tag",
    "ContactSource",
    "PhoneType",
    "ContactName",
    "ContactEmails",
    "ContactPhoneNumbers",
    "Contact",
    "Organization",
    "Tenant",
    "User",
    "Device",
    "Group",
    "AppType",
    "RoleType",
    "System",
    "Resource",
    "Permission",
    "Role",
    "Grant",
    "Feature",
    "Entitlement",
    "App",
    "PagedList",
    "OrganizationList",
    "TenantList",
    "UserList",
    "DeviceList",
    "GroupList",
    "GrantList",
    "EntitlementList",
    "FeatureList",
    "PermissionList",
    "ResourceList",
    "AppList",
]
