"""
oauthstore demo application.

Walks through the storage lifecycle an OAuth2 server goes through:
- Schema provisioning
- Client registration
- Authorization code save, load and expiry
- Access token save with refresh mirroring
- Access token removal leaving the refresh token usable
- Schema teardown

The backend and table prefix come from OAUTHSTORE_* environment
variables; by default everything runs in memory.
"""

import asyncio
import logging
import sys
from datetime import timedelta

from oauthstore.common.utils import get_current_time
from oauthstore.core.config import Settings
from oauthstore.core.types import AccessData, AuthorizeData, Client
from oauthstore.errors import OAuthStoreError, NotFoundError, TokenExpiredError
from oauthstore.storage import create_storage
from oauthstore.testing import SequentialAccessTokenGen


async def main() -> int:
    """Main demo function"""
    print("oauthstore Demo Application")
    print("=" * 50)
    print()

    settings = Settings.from_env()
    options = {"config": settings.redis} if settings.backend == "redis" else {}
    storage = create_storage(
        prefix=settings.table_prefix or "demo_",
        backend=settings.backend,
        schema_config=settings.schema,
        **options
    )

    print("Step 1: Schema Provisioning")
    print("-" * 40)
    try:
        await storage.create_schema()
        print(f"✓ Created tables: {', '.join(storage.config.table_names())}")
        print()
    except OAuthStoreError as e:
        print(f"✗ Schema provisioning failed: {e}")
        return 1

    try:
        print("Step 2: Client Registration")
        print("-" * 40)
        client = Client(id="1234", secret="aabbccdd", redirect_uri="http://localhost/callback")
        await storage.create_client(client)
        loaded = await storage.get_client(client.id)
        print(f"✓ Registered client {loaded.id}")
        print(f"  - Redirect URI: {loaded.redirect_uri}")
        print()

        print("Step 3: Authorization Code")
        print("-" * 40)
        authorize = AuthorizeData(
            client=client,
            code="9999",
            expires_in=3600,
            redirect_uri=client.redirect_uri,
            scope="read",
        )
        await storage.save_authorize(authorize)
        loaded_code = await storage.load_authorize(authorize.code)
        print(f"✓ Stored code {loaded_code.code}, expires at {loaded_code.expire_at()}")

        authorize.created_at = get_current_time() - timedelta(seconds=authorize.expires_in)
        await storage.save_authorize(authorize)
        try:
            await storage.load_authorize(authorize.code)
            print("✗ Expired code should not load")
        except TokenExpiredError as e:
            print(f"✓ Expired code rejected: {e}")
        await storage.remove_authorize(authorize.code)
        print()

        print("Step 4: Access Token With Refresh Mirror")
        print("-" * 40)
        token_gen = SequentialAccessTokenGen()
        access_token, refresh_token = token_gen.generate_access_token(generate_refresh=True)
        access = AccessData(
            client=client,
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=3600,
            scope="read",
        )
        await storage.save_access(access)
        print(f"✓ Access token {access_token} loads: {(await storage.load_access(access_token)).scope}")
        print(f"✓ Refresh token {refresh_token} loads: {(await storage.load_refresh(refresh_token)).access_token}")
        print()

        print("Step 5: Access Token Removal")
        print("-" * 40)
        await storage.remove_access(access_token)
        try:
            await storage.load_access(access_token)
            print("✗ Removed access token should not load")
        except NotFoundError as e:
            print(f"✓ Access token gone: {e}")
        refreshed = await storage.load_refresh(refresh_token)
        print(f"✓ Refresh token still usable for client {refreshed.client.id}")
        print()

    except OAuthStoreError as e:
        print(f"✗ Storage operation failed: {e}")
        return 1

    finally:
        print("Step 6: Schema Teardown")
        print("-" * 40)
        try:
            await storage.drop_schema()
            print("✓ Tables deleted")
            print()
        except OAuthStoreError as e:
            print(f"✗ Schema teardown failed: {e}")
        await storage.close()

    print("Demo completed successfully!")
    return 0


def run() -> None:
    """Console entry point."""
    logging.basicConfig(level=logging.WARNING)
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nDemo interrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    run()
