"""
Services - Thin facades over the request port.
"""

from meshydb.services.users_service import UsersService
from meshydb.services.meshes_service import MeshesService

__all__ = [
    "UsersService",
    "MeshesService",
]
