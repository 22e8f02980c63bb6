"""Groups and their device, grant and user memberships."""

from iamds_client.api.base import BaseApi, operation_method


class GroupApi(BaseApi):
    """Client for group endpoints."""

    add_device_to_group = operation_method("AddDeviceToGroup")
    add_grant_to_group = operation_method("AddGrantToGroup")
    add_user_to_group = operation_method("AddUserToGroup")
    create_group = operation_method("CreateGroup")
    delete_group = operation_method("DeleteGroup")
    get_group = operation_method("GetGroup")
    list_group_devices = operation_method("ListGroupDevices")
    list_group_grants = operation_method("ListGroupGrants")
    list_group_users = operation_method("ListGroupUsers")
    list_groups = operation_method("ListGroups")
    patch_group = operation_method("PatchGroup")
    remove_device_from_group = operation_method("RemoveDeviceFromGroup")
    remove_grant_from_group = operation_method("RemoveGrantFromGroup")
    remove_user_from_group = operation_method("RemoveUserFromGroup")
    replace_group = operation_method("ReplaceGroup")
