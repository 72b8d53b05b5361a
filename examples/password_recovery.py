"""
Password Recovery Example - Forgot password, then reset with the emailed code.
"""

import asyncio

from meshydb import ResetPassword, initialize
from meshydb.errors import VerificationError


async def main():
    async with initialize("my-account", "my-public-key") as client:
        verification = await client.forgot_password("alice")
        print(f"Reset requested. Hint: {verification.hint} (attempt {verification.attempt})")

        code = input("Verification code: ")
        password = input("New password: ")

        try:
            await client.reset_password(ResetPassword.from_hash(verification, code, password))
        except VerificationError:
            print("Code rejected or expired, request a new one")
            return

        connection = await client.login("alice", password)
        print(f"Signed in again: {connection.is_connected}")

        anonymous = await client.login_anonymously()
        guest = await anonymous.users_service.get_self()
        print(f"Anonymous identity: {guest.username}")


if __name__ == "__main__":
    asyncio.run(main())
