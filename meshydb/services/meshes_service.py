"""
Meshes Service - Document CRUD and paged search over named collections.

Filter and orderby expressions belong to the server's query engine; they
are passed through untouched.
"""

import json
import logging
from typing import Any, Awaitable, Dict, Mapping, Optional, Type, TypeVar, Union
from urllib.parse import quote

from meshydb.domain.mesh import ID_FIELD, MeshData, PageResult
from meshydb.errors import require
from meshydb.ports.request_port import RequestPort

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=MeshData)

Document = Union[MeshData, Mapping[str, Any]]


def _query_expression(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"))


def _body(data: Document) -> Dict[str, Any]:
    if isinstance(data, MeshData):
        return data.to_dict()
    return dict(data)


def _model_for(data: Document, model: Optional[Type[T]]) -> Type[MeshData]:
    if model is not None:
        return model
    return type(data) if isinstance(data, MeshData) else MeshData


class MeshesService:
    """
    Meshes service - every call is authenticated.

    Example:
        note = await meshes.create("notes", MeshData(title="groceries"))
        note["done"] = True
        await meshes.update("notes", note)     # uses note["_id"]
    """

    def __init__(self, request_service: RequestPort, auth_id: str):
        self._requests = request_service
        self._auth_id = auth_id

    @staticmethod
    def _path(mesh_name: str, id: Optional[str] = None) -> str:
        path = f"meshes/{quote(mesh_name, safe='')}"
        if id is not None:
            path = f"{path}/{quote(str(id), safe='')}"
        return path

    def get(self, mesh_name: str, id: str, model: Type[T] = MeshData) -> Awaitable[T]:
        """
        Get a document by id.

        Raises:
            NotFoundError: If no document has that id
        """
        require(mesh_name, "mesh_name")
        require(id, "id")
        return self._get(mesh_name, id, model)

    async def _get(self, mesh_name: str, id: str, model: Type[T]) -> T:
        data = await self._requests.get(self._path(mesh_name, id), auth_id=self._auth_id)
        return model.from_dict(data)

    def search(
        self,
        mesh_name: str,
        filter: Any = None,
        orderby: Any = None,
        page_number: Optional[int] = None,
        page_size: Optional[int] = None,
        model: Type[T] = MeshData,
    ) -> Awaitable[PageResult[T]]:
        """
        Search a mesh.

        Args:
            mesh_name: Collection name
            filter: Server query expression (string, or dict/list sent as JSON)
            orderby: Server sort expression (string, or dict/list sent as JSON)
            page_number: Page to return (server default if omitted)
            page_size: Page size (server default if omitted)
            model: MeshData subclass to build results with

        Returns:
            Page of results with the total record count
        """
        require(mesh_name, "mesh_name")
        params = {
            "filter": _query_expression(filter),
            "orderby": _query_expression(orderby),
            "page": page_number,
            "pageSize": page_size,
        }
        return self._search(mesh_name, params, model)

    async def _search(self, mesh_name: str, params: Dict[str, Any], model: Type[T]) -> PageResult[T]:
        data = await self._requests.get(self._path(mesh_name), params=params, auth_id=self._auth_id)
        return PageResult.from_dict(data or {}, model.from_dict)

    def create(self, mesh_name: str, data: Document, model: Optional[Type[T]] = None) -> Awaitable[T]:
        """Create a document; the server assigns `_id` and `_rid`."""
        require(mesh_name, "mesh_name")
        return self._create(mesh_name, data, _model_for(data, model))

    async def _create(self, mesh_name: str, data: Document, model: Type[T]) -> T:
        stored = await self._requests.post(self._path(mesh_name), _body(data), auth_id=self._auth_id)
        logger.debug("Created document in %s", mesh_name)
        return model.from_dict(stored)

    def update(
        self,
        mesh_name: str,
        data: Document,
        id: Optional[str] = None,
        model: Optional[Type[T]] = None,
    ) -> Awaitable[T]:
        """
        Replace a document.

        Args:
            mesh_name: Collection name
            data: Document to store
            id: Document id (defaults to data["_id"])

        Raises:
            ValidationError: If neither id nor data["_id"] is present
        """
        require(mesh_name, "mesh_name")
        id = id or data.get(ID_FIELD)
        require(id, "id")
        return self._update(mesh_name, data, id, _model_for(data, model))

    async def _update(self, mesh_name: str, data: Document, id: str, model: Type[T]) -> T:
        stored = await self._requests.put(self._path(mesh_name, id), _body(data), auth_id=self._auth_id)
        return model.from_dict(stored)

    def delete(self, mesh_name: str, id: str) -> Awaitable[None]:
        """Delete one document. Irreversible."""
        require(mesh_name, "mesh_name")
        require(id, "id")
        return self._delete(self._path(mesh_name, id))

    def delete_collection(self, mesh_name: str) -> Awaitable[None]:
        """Delete a whole mesh. Irreversible."""
        require(mesh_name, "mesh_name")
        return self._delete(self._path(mesh_name))

    async def _delete(self, path: str) -> None:
        await self._requests.delete(path, auth_id=self._auth_id)
        logger.info("Deleted %s", path)
