"""Example usage of the Fisafe client."""

import asyncio
import logging
from datetime import datetime, timedelta

from fisafe import FisafeClient, FisafeError, IdentifierType, SyncFisafeClient, sync_client


def example_sync():
    """Example using the synchronous client."""
    with SyncFisafeClient(
        auth_url="https://auth.fisafe.cloud",
        realm="fisafe",
        client_id="fisafe-sdk",
        username="operator@example.com",
        password="your-password",
    ) as client:
        client.authenticate()

        # Pick the first organization the account belongs to
        organizations = client.get_organizations()
        for org_id, url in organizations.items():
            print(f"Organization {org_id}: {url}")
        client.set_api_url(next(iter(organizations.values())))

        # Create a user with an RFID tag and a licence plate
        user = client.create_user("alice")
        client.create_identifier(user["id"], "04A224B2C15E80")
        client.create_identifier(user["id"], "ABC-123", IdentifierType.LICENCE_PLATE)

        # Grant access to context 7 for the next 30 days
        now = datetime.now().replace(microsecond=0)
        grant = client.create_granted_access(
            context_id=7,
            user_id=user["id"],
            valid_from=now,
            valid_to=now + timedelta(days=30),
        )
        print(f"Created grant: {grant}")

        users = client.list_users({"identifierSubstring": "ali"}, per_page=20)
        print(f"Found users: {users}")


def example_with_helper():
    """Example using sync_client() with settings from FISAFE_* environment variables."""
    from fisafe import ClientSettings

    with sync_client(settings=ClientSettings()) as client:
        print(client.list_granted_accesses(page=1, per_page=50))


async def example_async():
    """Example using the async client."""
    async with FisafeClient(
        auth_url="https://auth.fisafe.cloud",
        realm="fisafe",
        client_id="fisafe-sdk",
        username="operator@example.com",
        password="your-password",
    ) as client:
        await client.authenticate()
        await client.set_api_url("https://org1.fisafe.cloud/v1/api/")
        print(await client.list_users())


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    try:
        example_sync()
        asyncio.run(example_async())
    except FisafeError as e:
        print(f"Fisafe error ({e.status_code}): {e.message}")
