"""
Unit tests for MeshData and PageResult.
"""

import pytest
from meshydb.domain.mesh import MeshData, PageResult
from meshydb.errors import ValidationError


class Note(MeshData):
    """Typed document used in tests."""

    @property
    def title(self):
        return self.get("title")


def test_arbitrary_fields():
    """Test caller-defined fields behave like a mapping."""
    note = MeshData(title="groceries", done=False)
    note["done"] = True

    assert note["title"] == "groceries"
    assert note["done"] is True
    assert len(note) == 2
    assert note.id is None
    assert note.rid is None


def test_reserved_fields_set_once():
    """Test server-assigned ids can be filled in but not changed."""
    note = MeshData(title="x")
    note["_id"] = "abc"
    note["_id"] = "abc"  # same value is a no-op

    assert note.id == "abc"
    with pytest.raises(ValidationError):
        note["_id"] = "other"


def test_reserved_fields_not_removable():
    note = MeshData({"_id": "abc", "_rid": "r1", "title": "x"})

    with pytest.raises(ValidationError):
        del note["_rid"]
    with pytest.raises(ValidationError):
        note.pop("_id")
    with pytest.raises(ValidationError):
        note.update({"_id": "zzz"})

    del note["title"]
    assert "title" not in note


def test_to_dict_drops_unassigned_ids():
    note = MeshData({"_id": None, "title": "x"})

    assert note.to_dict() == {"title": "x"}


def test_fields_excludes_reserved():
    note = MeshData({"_id": "abc", "_rid": "r1", "title": "x"})

    assert note.fields() == {"title": "x"}
    assert note.to_dict() == {"_id": "abc", "_rid": "r1", "title": "x"}


def test_equality_with_plain_dict():
    assert MeshData(title="x") == {"title": "x"}


def test_subclass_from_dict():
    note = Note.from_dict({"_id": "abc", "title": "typed"})

    assert isinstance(note, Note)
    assert note.title == "typed"


def test_page_result_from_dict():
    """Test page built from a search response."""
    page = PageResult.from_dict(
        {
            "results": [{"_id": "1", "title": "a"}, {"_id": "2", "title": "b"}],
            "page": 2,
            "pageSize": 2,
            "totalRecords": 5,
        },
        Note.from_dict,
    )

    assert len(page) == 2
    assert page.page == 2
    assert page.page_size == 2
    assert page.total_records == 5
    assert page.total_pages == 3
    assert [n.title for n in page] == ["a", "b"]
    assert all(isinstance(n, Note) for n in page.results)


def test_page_result_is_read_only():
    page = PageResult.from_dict({"results": []}, MeshData.from_dict)

    assert page.total_records == 0
    assert page.total_pages == 0
    with pytest.raises(AttributeError):
        page.page = 3
