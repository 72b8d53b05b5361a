from meshydb.sdk.client import (
    ClientState,
    MeshyClient,
    MeshyConnection,
    current_connection,
    initialize,
    initialize_with_tenant,
)

__all__ = [
    "ClientState",
    "MeshyClient",
    "MeshyConnection",
    "current_connection",
    "initialize",
    "initialize_with_tenant",
]
