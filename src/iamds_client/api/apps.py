"""Apps registered in an organization, their grants and client secrets."""

from iamds_client.api.base import BaseApi, operation_method


class AppApi(BaseApi):
    """
    Client for app endpoints.

    ``create_app_secret`` returns the generated secret as plain text; it is
    only shown once.
    """

    add_grant_to_app = operation_method("AddGrantToApp")
    create_app = operation_method("CreateApp")
    create_app_secret = operation_method("CreateAppSecret")
    delete_app = operation_method("DeleteApp")
    get_app = operation_method("GetApp")
    list_app_grants = operation_method("ListAppGrants")
    list_apps = operation_method("ListApps")
    patch_app = operation_method("PatchApp")
    remove_grant_from_app = operation_method("RemoveGrantFromApp")
    replace_app = operation_method("ReplaceApp")
