import json

import pytest

from library_catalog.book import BookRecord
from library_catalog.catalog import Catalog
from library_catalog.errors import DuplicateKeyError, NotFoundError, ParseError


@pytest.fixture
def catalog():
    catalog = Catalog()
    catalog.add(BookRecord("1", "The Hobbit", "J.R.R. Tolkien", 1937))
    catalog.add(BookRecord("2", "Dune", "Frank Herbert", 1965))
    catalog.add(BookRecord("3", "The Silmarillion", "J.R.R. Tolkien", 1977, available=False))
    return catalog

def test_add_then_get_by_id():
    catalog = Catalog()
    book = BookRecord("978-1", "Dune", "Frank Herbert", 1965)
    catalog.add(book)
    assert catalog.get_by_id("978-1") == book
    assert "978-1" in catalog
    assert len(catalog) == 1

def test_add_duplicate_leaves_catalog_unchanged(catalog):
    before = catalog.copy()
    with pytest.raises(DuplicateKeyError, match="Book with ISBN 1 already exists."):
        catalog.add(BookRecord("1", "Another", "Someone", 2000))
    assert catalog == before
    assert catalog.get_by_id("1").title == "The Hobbit"

def test_remove_returns_record(catalog):
    removed = catalog.remove("2")
    assert removed.title == "Dune"
    assert catalog.get_by_id("2") is None
    assert [b.isbn for b in catalog.list_all()] == ["1", "3"]

def test_remove_missing_leaves_catalog_unchanged(catalog):
    before = catalog.copy()
    with pytest.raises(NotFoundError, match="Book with ISBN 999 not found."):
        catalog.remove("999")
    assert catalog == before

def test_toggle_twice_restores_availability(catalog):
    assert catalog.toggle_availability("1").available is False
    assert catalog.get_by_id("1").available is False
    assert catalog.toggle_availability("1").available is True

def test_toggle_missing():
    with pytest.raises(NotFoundError):
        Catalog().toggle_availability("nope")

def test_get_by_id_missing(catalog):
    assert catalog.get_by_id("nope") is None

def test_list_all_preserves_insertion_order(catalog):
    assert [b.isbn for b in catalog.list_all()] == ["1", "2", "3"]
    assert [b.isbn for b in catalog] == ["1", "2", "3"]

def test_search_by_title_case_insensitive(catalog):
    assert catalog.search_by_title("hobbit") == [catalog.get_by_id("1")]
    assert catalog.search_by_title("xyz123") == []

def test_search_by_title_returns_matches_in_order(catalog):
    assert [b.isbn for b in catalog.search_by_title("THE")] == ["1", "3"]

def test_search_by_author(catalog):
    assert [b.isbn for b in catalog.search_by_author("tolkien")] == ["1", "3"]
    assert catalog.search_by_author("asimov") == []

def test_search_dispatch(catalog):
    assert catalog.search("2", by="id") == [catalog.get_by_id("2")]
    assert catalog.search("missing", by="id") == []
    assert [b.isbn for b in catalog.search("dune", by="title")] == ["2"]
    assert [b.isbn for b in catalog.search("herbert", by="author")] == ["2"]
    with pytest.raises(ValueError, match="Unknown search kind"):
        catalog.search("x", by="year")

def test_statistics(catalog):
    assert catalog.get_statistics() == {
        "total_books": 3,
        "available_books": 2,
        "on_loan_books": 1,
        "unique_authors": 2,
    }

def test_copy_is_independent(catalog):
    clone = catalog.copy()
    catalog.toggle_availability("1")
    catalog.remove("2")
    assert clone.get_by_id("1").available is True
    assert clone.get_by_id("2") is not None

def test_serialize_format(catalog):
    pairs = json.loads(catalog.serialize())
    assert pairs[0] == ["1", {"isbn": "1", "title": "The Hobbit", "author": "J.R.R. Tolkien", "year": 1937, "available": True}]
    assert [p[0] for p in pairs] == ["1", "2", "3"]

def test_round_trip_preserves_records_and_order(catalog):
    restored = Catalog.deserialize(catalog.serialize())
    assert restored == catalog
    assert restored.list_all() == catalog.list_all()

def test_round_trip_non_ascii():
    catalog = Catalog()
    catalog.add(BookRecord("85-1", "Memórias Póstumas de Brás Cubas", "Machado de Assis", 1881))
    assert Catalog.deserialize(catalog.serialize()) == catalog

def test_deserialize_empty_list():
    assert len(Catalog.deserialize("[]")) == 0

@pytest.mark.parametrize("data", [
    "not json",
    "",
    '{"1": {}}',
    '[["1"]]',
    '[{"isbn": "1"}]',
    '[["1", {"isbn": "1", "title": "T", "author": "A"}]]',
    '[["1", {"isbn": "1", "title": "T", "author": "A", "year": "x"}]]',
    '[["2", {"isbn": "1", "title": "T", "author": "A", "year": 1}]]',
    '[["1", {"isbn": "1", "title": "T", "author": "A", "year": 1}], ["1", {"isbn": "1", "title": "U", "author": "B", "year": 2}]]',
])
def test_deserialize_rejects_malformed(data):
    with pytest.raises(ParseError):
        Catalog.deserialize(data)

def test_dune_scenario():
    catalog = Catalog()
    catalog.add(BookRecord(isbn="978-1", title="Dune", author="Frank Herbert", year=1965))
    assert catalog.get_by_id("978-1").available is True
    assert catalog.toggle_availability("978-1").available is False
    catalog.remove("978-1")
    assert len(catalog) == 0

def test_deserialize_deeply_nested_json():
    with pytest.raises(ParseError, match="not valid JSON"):
        Catalog.deserialize("[" * 200000)
