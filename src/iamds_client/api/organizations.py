"""Organizations and the apps, tenants and users they own."""

from iamds_client.api.base import BaseApi, operation_method


class OrganizationApi(BaseApi):
    """
    Client for organization endpoints.

    Example:
        ```python
        org = organizations.create_organizations(Organization(display_name="Acme"))
        envelope = organizations.get_organization.with_http_info(org.id)
        organizations.patch_organization(
            org.id,
            organization={"displayName": "Acme Inc"},
            if_match=envelope.etag,
        )
        ```
    """

    create_organizations = operation_method("CreateOrganizations")
    delete_organization = operation_method("DeleteOrganization")
    get_organization = operation_method("GetOrganization")
    list_organization_apps = operation_method("ListOrganizationApps")
    list_organization_tenants = operation_method("ListOrganizationTenants")
    list_organization_users = operation_method("ListOrganizationUsers")
    list_organizations = operation_method("ListOrganizations")
    patch_organization = operation_method("PatchOrganization")
    replace_organization = operation_method("ReplaceOrganization")
