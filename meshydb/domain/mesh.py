"""
Mesh Domain Models - Open-ended documents and search pages.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Iterator, List, MutableMapping, Optional, TypeVar

from meshydb.errors import ValidationError

ID_FIELD = "_id"
RID_FIELD = "_rid"
RESERVED_FIELDS = (ID_FIELD, RID_FIELD)


class MeshData(MutableMapping[str, Any]):
    """
    Document stored in a mesh (named collection).

    Holds arbitrary caller fields plus the server-owned `_id` and `_rid`.

    Domain rules:
    - `_id`/`_rid` may be filled in once (by the server response)
    - Once set they can't be changed or removed client-side

    Example:
        note = MeshData(title="groceries", done=False)
        note["done"] = True
        note.id   # None until the server assigns it
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None, **fields: Any):
        self._fields: Dict[str, Any] = {}
        for key, value in {**(data or {}), **fields}.items():
            self[key] = value

    @property
    def id(self) -> Optional[str]:
        return self._fields.get(ID_FIELD)

    @property
    def rid(self) -> Optional[str]:
        return self._fields.get(RID_FIELD)

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __setitem__(self, key: str, value: Any) -> None:
        if key in RESERVED_FIELDS and self._fields.get(key) not in (None, value):
            raise ValidationError(f"Server-owned field can't be changed: {key}")
        self._fields[key] = value

    def __delitem__(self, key: str) -> None:
        if key in RESERVED_FIELDS and self._fields.get(key) is not None:
            raise ValidationError(f"Server-owned field can't be removed: {key}")
        del self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._fields!r})"

    def fields(self) -> Dict[str, Any]:
        """Caller-defined fields only (reserved keys stripped)."""
        return {k: v for k, v in self._fields.items() if k not in RESERVED_FIELDS}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize, dropping reserved keys the server hasn't assigned yet."""
        return {
            k: v for k, v in self._fields.items()
            if not (k in RESERVED_FIELDS and v is None)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MeshData":
        return cls(data)


T = TypeVar("T", bound=MeshData)


@dataclass(frozen=True)
class PageResult(Generic[T]):
    """
    One page of search results (read-only).

    Only built from a deserialized server response.
    """
    results: List[T] = field(default_factory=list)
    page: int = 1
    page_size: int = 0
    total_records: int = 0

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[T]:
        return iter(self.results)

    @property
    def total_pages(self) -> int:
        if not self.page_size:
            return 0
        return -(-self.total_records // self.page_size)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], item_factory: Callable[[Dict[str, Any]], T]) -> "PageResult[T]":
        return cls(
            results=[item_factory(item) for item in data.get("results") or []],
            page=data.get("page", 1),
            page_size=data.get("pageSize", 0),
            total_records=data.get("totalRecords", 0),
        )
