"""Tenants and the users, devices, groups and entitlements inside them."""

from iamds_client.api.base import BaseApi, operation_method


class TenantApi(BaseApi):
    """Client for tenant endpoints."""

    add_device_to_tenant = operation_method("AddDeviceToTenant")
    add_grant_to_tenant_user = operation_method("AddGrantToTenantUser")
    add_user_to_tenant = operation_method("AddUserToTenant")
    create_tenant = operation_method("CreateTenant")
    delete_tenant = operation_method("DeleteTenant")
    get_tenant = operation_method("GetTenant")
    list_tenant_devices = operation_method("ListTenantDevices")
    list_tenant_entitlements = operation_method("ListTenantEntitlements")
    list_tenant_groups = operation_method("ListTenantGroups")
    list_tenant_user_grants = operation_method("ListTenantUserGrants")
    list_tenant_user_groups = operation_method("ListTenantUserGroups")
    list_tenant_users = operation_method("ListTenantUsers")
    list_tenants = operation_method("ListTenants")
    patch_tenant = operation_method("PatchTenant")
    remove_device_from_tenant = operation_method("RemoveDeviceFromTenant")
    remove_grant_from_tenant_user = operation_method("RemoveGrantFromTenantUser")
    remove_user_from_tenant = operation_method("RemoveUserFromTenant")
    replace_tenant = operation_method("ReplaceTenant")
