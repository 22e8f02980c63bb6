from iamds_client.api.base import BaseApi, operation_method


class PermissionApi(BaseApi):
    """Client for permission endpoints."""

    create_permission = operation_method("CreatePermission")
    delete_permission = operation_method("DeletePermission")
    get_permission = operation_method("GetPermission")
    list_permissions = operation_method("ListPermissions")
    patch_permission = operation_method("PatchPermission")
    replace_permission = operation_method("ReplacePermission")
