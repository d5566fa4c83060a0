"""
Basic oauthstore usage example.

This example demonstrates the fundamental storage operations:
- Creating a storage and its tables
- Registering a client
- Issuing and exchanging an authorization code
- Typed user data with projected attributes
"""

import asyncio
from dataclasses import dataclass

from oauthstore import AccessData, AuthorizeData, Client, TokenExpiredError, create_storage


@dataclass
class Account:
    """User data attached to issued tokens."""
    username: str
    tenant: str

    def to_attribute_values(self):
        return {"username": self.username, "tenant": self.tenant}

    @classmethod
    def from_dict(cls, data):
        return cls(**data)


async def basic_example():
    """Demonstrate basic oauthstore usage"""
    print("Basic oauthstore Example")
    print("=" * 30)

    # 1. Create storage
    storage = create_storage(prefix="example_", create_user_data=Account.from_dict)
    await storage.create_schema()
    print(f"✓ Created tables {', '.join(storage.config.table_names())}")

    try:
        # 2. Register a client
        client = Client(id="basic-example-client", secret="example-secret",
                        redirect_uri="https://app.example.com/callback")
        await storage.create_client(client)
        print(f"✓ Registered client {client.id}")

        # 3. Issue an authorization code
        await storage.save_authorize(AuthorizeData(
            client=client,
            code="code-1",
            expires_in=600,
            redirect_uri=client.redirect_uri,
            scope="read write",
        ))
        print("✓ Saved authorization code")

        # 4. Exchange it for tokens
        grant = await storage.load_authorize("code-1")
        await storage.save_access(AccessData(
            client=grant.client,
            authorize_data=grant,
            access_token="access-1",
            refresh_token="refresh-1",
            expires_in=3600,
            scope=grant.scope,
            user_data=Account(username="alice", tenant="acme"),
        ))
        await storage.remove_authorize("code-1")
        print("✓ Exchanged code for access and refresh tokens")

        # 5. Look the grant up by either token
        access = await storage.load_access("access-1")
        refresh = await storage.load_refresh("refresh-1")
        print(f"✓ Access token belongs to {access.user_data.username}@{access.user_data.tenant}")
        print(f"✓ Refresh token maps back to access token {refresh.access_token}")

        item = await storage.backend.get_item(storage.config.access_table, {"token": "access-1"})
        print(f"✓ Stored attributes: {', '.join(sorted(item))}")

    except TokenExpiredError as e:
        print(f"✗ Unexpected expiry: {e}")

    finally:
        await storage.drop_schema()
        await storage.close()
        print("✓ Dropped tables")


if __name__ == "__main__":
    asyncio.run(basic_example())
