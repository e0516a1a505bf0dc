import pytest

from library_catalog.book import BookRecord
from library_catalog.errors import ParseError


def test_available_defaults_to_true():
    book = BookRecord("978-1", "Dune", "Frank Herbert", 1965)
    assert book.available is True

def test_empty_isbn_rejected():
    with pytest.raises(ValueError, match="ISBN cannot be empty."):
        BookRecord("  ", "Dune", "Frank Herbert", 1965)

def test_to_dict():
    book = BookRecord("978-1", "Dune", "Frank Herbert", 1965, available=False)
    assert book.to_dict() == {
        "isbn": "978-1",
        "title": "Dune",
        "author": "Frank Herbert",
        "year": 1965,
        "available": False,
    }

def test_from_dict_missing_available_defaults():
    book = BookRecord.from_dict({"isbn": "1", "title": "The Hobbit", "author": "J.R.R. Tolkien", "year": 1937})
    assert book == BookRecord("1", "The Hobbit", "J.R.R. Tolkien", 1937, True)

@pytest.mark.parametrize("data, message", [
    ({"title": "T", "author": "A", "year": 1}, "missing required field 'isbn'"),
    ({"isbn": "1", "author": "A", "year": 1}, "missing required field 'title'"),
    ({"isbn": "1", "title": "T", "author": "A"}, "missing required field 'year'"),
    ({"isbn": 1, "title": "T", "author": "A", "year": 1}, "'isbn' must be a string"),
    ({"isbn": "1", "title": "T", "author": None, "year": 1}, "'author' must be a string"),
    ({"isbn": "1", "title": "T", "author": "A", "year": "1937"}, "'year' must be an integer"),
    ({"isbn": "1", "title": "T", "author": "A", "year": None}, "'year' must be an integer"),
    ({"isbn": "1", "title": "T", "author": "A", "year": True}, "'year' must be an integer"),
    ({"isbn": "1", "title": "T", "author": "A", "year": 1, "available": "yes"}, "'available' must be a boolean"),
    ({"isbn": "", "title": "T", "author": "A", "year": 1}, "ISBN cannot be empty"),
])
def test_from_dict_rejects_malformed(data, message):
    with pytest.raises(ParseError, match=message):
        BookRecord.from_dict(data)

def test_from_dict_rejects_non_mapping():
    with pytest.raises(ParseError, match="must be an object"):
        BookRecord.from_dict(["1", "T"])

@pytest.mark.parametrize("kwargs, message", [
    ({"year": 1965.0}, "'year' must be an integer"),
    ({"year": "1965"}, "'year' must be an integer"),
    ({"year": False}, "'year' must be an integer"),
    ({"title": None}, "'title' must be a string"),
    ({"author": 42}, "'author' must be a string"),
    ({"isbn": 978}, "'isbn' must be a string"),
    ({"available": "yes"}, "'available' must be a boolean"),
])
def test_constructor_rejects_mistyped_fields(kwargs, message):
    fields = {"isbn": "978-1", "title": "Dune", "author": "Frank Herbert", "year": 1965}
    fields.update(kwargs)
    with pytest.raises(ValueError, match=message):
        BookRecord(**fields)
