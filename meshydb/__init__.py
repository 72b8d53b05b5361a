"""
MeshyDB Client - Authentication and document storage SDK.

Token lifecycle (acquire, cache, attach to requests) under thin user and
mesh CRUD services.

Usage:
    import meshydb

    client = meshydb.initialize("my-account", "public-key")
    connection = await client.login("alice", "s3cret")

    note = await connection.meshes_service.create("notes", meshydb.MeshData(title="hi"))
    page = await connection.meshes_service.search("notes", page_size=10)

    token = connection.retrieve_persistence_token()
    await connection.signout()
"""

import logging

__version__ = "0.1.0"

from meshydb.sdk.client import (
    ClientState,
    MeshyClient,
    MeshyConnection,
    current_connection,
    initialize,
    initialize_with_tenant,
)
from meshydb.domain import (
    Constants,
    MeshData,
    PageResult,
    User,
    RegisterUser,
    SecurityQuestion,
    SecurityQuestionUpdate,
    UserVerificationHash,
    UserVerificationCheck,
    ResetPassword,
)
from meshydb.errors import (
    MeshyError,
    ValidationError,
    ClientError,
    AuthenticationError,
    NotFoundError,
    ConflictError,
    VerificationError,
    ServerError,
    TransportError,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "initialize",
    "initialize_with_tenant",
    "current_connection",
    "ClientState",
    "MeshyClient",
    "MeshyConnection",
    "Constants",
    "MeshData",
    "PageResult",
    "User",
    "RegisterUser",
    "SecurityQuestion",
    "SecurityQuestionUpdate",
    "UserVerificationHash",
    "UserVerificationCheck",
    "ResetPassword",
    "MeshyError",
    "ValidationError",
    "ClientError",
    "AuthenticationError",
    "NotFoundError",
    "ConflictError",
    "VerificationError",
    "ServerError",
    "TransportError",
]
