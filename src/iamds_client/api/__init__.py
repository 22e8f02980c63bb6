"""
Resource API groups.

One class per area of the IAMDS API, each a set of operation methods over
a shared ``ApiClient``.
"""

from iamds_client.api.apps import AppApi
from iamds_client.api.base import BaseApi, BoundOperation, operation_method
from iamds_client.api.entitlements import EntitlementApi
from iamds_client.api.features import FeatureApi
from iamds_client.api.grants import GrantApi
from iamds_client.api.groups import GroupApi
from iamds_client.api.organizations import OrganizationApi
from iamds_client.api.permissions import PermissionApi
from iamds_client.api.resources import ResourceApi
from iamds_client.api.tenants import TenantApi

__all__ = [
    "BaseApi",
    "BoundOperation",
    "operation_method",
    "AppApi",
    "EntitlementApi",
    "FeatureApi",
    "GrantApi",
    "GroupApi",
    "OrganizationApi",
    "PermissionApi",
    "ResourceApi",
    "TenantApi",
]
