"""
Basic usage examples for the IAMDS API client.

This example demonstrates:
- Client initialization from environment variables
- Creating and reading an organization
- Conditional updates with ETags
- Error handling
"""

import asyncio

from iamds_client import (
    CancellationToken,
    Configuration,
    IamdsClient,
    IamdsClientError,
    NotFoundError,
    Organization,
    PreconditionFailedError,
    Tenant,
)


def sync_example(config: Configuration) -> None:
    with IamdsClient(config) as client:
        org = client.organizations.create_organizations(Organization(display_name="Example Corp"))
        print(f"Created organization {org.display_name} (ID: {org.id})")

        tenant = client.tenants.create_tenant(
            Tenant(display_name="Example Tenant", organization={"identifier": org.id})
        )

        # Read with headers to get the current ETag
        envelope = client.tenants.get_tenant.with_http_info(tenant.id)
        try:
            client.tenants.patch_tenant(
                tenant.id,
                {"displayName": "Renamed Tenant"},
                if_match=envelope.etag,
            )
        except PreconditionFailedError:
            print("Tenant changed since it was read; fetch it again and retry")

        page = client.tenants.list_tenant_users(tenant.id, top=25, count=True)
        print(f"Tenant has {page.recordset_count} users")

        try:
            client.tenants.get_tenant("does-not-exist")
        except NotFoundError as e:
            print(f"Not found: {e}")


async def async_example(config: Configuration) -> None:
    async with IamdsClient(config) as client:
        token = CancellationToken()
        page = await client.organizations.list_organizations_async(
            top=10, cancellation_token=token
        )
        for org in page.items:
            print(f"  - {org.display_name} (ID: {org.id})")


def main():
    # Reads IAMDS_ENVIRONMENT, IAMDS_CLIENT_ID, IAMDS_CLIENT_SECRET, ...
    config = Configuration.from_env()
    try:
        sync_example(config)
        asyncio.run(async_example(config))
    except IamdsClientError as e:
        print(f"API error: {e}")


if __name__ == "__main__":
    main()
