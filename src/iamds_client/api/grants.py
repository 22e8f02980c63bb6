from iamds_client.api.base import BaseApi, operation_method


class GrantApi(BaseApi):
    """Client for grant endpoints."""

    create_grant = operation_method("CreateGrant")
    delete_grant = operation_method("DeleteGrant")
    get_grant = operation_method("GetGrant")
    list_grants = operation_method("ListGrants")
    patch_grant = operation_method("PatchGrant")
    replace_grant = operation_method("ReplaceGrant")
