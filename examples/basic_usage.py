"""
Basic Usage Example - Sign in, store documents, sign out.

Set MESHYDB_ACCOUNT_NAME and MESHYDB_PUBLIC_KEY before running.
"""

import asyncio
import logging

from meshydb import MeshData, MeshyClient
from meshydb.errors import AuthenticationError


async def main():
    logging.basicConfig(level=logging.INFO)

    async with MeshyClient.from_env() as client:
        try:
            connection = await client.login("alice", "s3cret")
        except AuthenticationError as e:
            print(f"Login failed: {e.message}")
            return

        me = await connection.users_service.get_self()
        print(f"Signed in as {me.username} (roles: {', '.join(me.roles) or 'none'})")

        meshes = connection.meshes_service
        note = await meshes.create("notes", MeshData(title="groceries", done=False))
        print(f"Created note {note.id}")

        note["done"] = True
        await meshes.update("notes", note)

        page = await meshes.search("notes", filter={"done": True}, page_size=10)
        print(f"{page.total_records} finished notes, showing {len(page)}")

        # Store this somewhere safe to skip the password next time
        token = connection.retrieve_persistence_token()
        print(f"Persistence token: {token[:8]}...")

        await connection.signout()
        print(f"Client state: {client.state.value}")


if __name__ == "__main__":
    asyncio.run(main())
