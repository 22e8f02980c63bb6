from iamds_client.api.base import BaseApi, operation_method


class ResourceApi(BaseApi):
    """
    Client for resource endpoints.

    ``delete_resource`` takes no ``if_match``; ``get_resource`` accepts both
    ``if_none_match`` and ``if_match``.
    """

    create_resource = operation_method("CreateResource")
    delete_resource = operation_method("DeleteResource")
    get_resource = operation_method("GetResource")
    list_resource_permissions = operation_method("ListResourcePermissions")
    list_resources = operation_method("ListResources")
    patch_resource = operation_method("PatchResource")
    replace_resource = operation_method("ReplaceResource")
