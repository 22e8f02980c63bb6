from iamds_client.api.base import BaseApi, operation_method


class EntitlementApi(BaseApi):
    """Client for entitlement endpoints."""

    create_entitlement = operation_method("CreateEntitlement")
    delete_entitlement = operation_method("DeleteEntitlement")
    get_entitlement = operation_method("GetEntitlement")
    list_entitlements = operation_method("ListEntitlements")
    patch_entitlement = operation_method("PatchEntitlement")
    replace_entitlement = operation_method("ReplaceEntitlement")
