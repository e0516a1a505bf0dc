from __future__ import annotations

import json
from dataclasses import replace
from typing import Dict, Iterator, List, Optional, Any

from library_catalog.book import BookRecord
from library_catalog.errors import DuplicateKeyError, NotFoundError, ParseError

SEARCH_KINDS = ("id", "title", "author")


class Catalog:
    """In-memory collection of book records keyed by ISBN.

    Records keep their insertion order, so listings and search results are
    stable between calls and across a serialize/deserialize round-trip.
    """

    def __init__(self) -> None:
        self._books: Dict[str, BookRecord] = {}

    # ------------------------- Core operations ------------------------- #
    def add(self, record: BookRecord) -> None:
        """Insert a record. Prevent duplicates by ISBN."""
        if record.isbn in self._books:
            raise DuplicateKeyError(record.isbn)
        self._books[record.isbn] = record

    def remove(self, isbn: str) -> BookRecord:
        try:
            return self._books.pop(isbn)
        except KeyError:
            raise NotFoundError(isbn) from None

    def toggle_availability(self, isbn: str) -> BookRecord:
        """Flip the loan status of a record in place and return it."""
        record = self._books.get(isbn)
        if record is None:
            raise NotFoundError(isbn)
        record.available = not record.available
        return record

    def get_by_id(self, isbn: str) -> Optional[BookRecord]:
        return self._books.get(isbn)

    def list_all(self) -> List[BookRecord]:
        return list(self._books.values())

    # ------------------------- Search ------------------------- #
    def search_by_title(self, term: str) -> List[BookRecord]:
        needle = term.lower()
        return [b for b in self._books.values() if needle in b.title.lower()]

    def search_by_author(self, term: str) -> List[BookRecord]:
        needle = term.lower()
        return [b for b in self._books.values() if needle in b.author.lower()]

    def search(self, term: str, by: str = "title") -> List[BookRecord]:
        """Search by ``id`` (exact keyed lookup), ``title`` or ``author``."""
        if by == "id":
            record = self.get_by_id(term)
            return [record] if record else []
        if by == "title":
            return self.search_by_title(term)
        if by == "author":
            return self.search_by_author(term)
        raise ValueError(f"Unknown search kind '{by}'. Use one of: {', '.join(SEARCH_KINDS)}.")

    def get_statistics(self) -> Dict[str, Any]:
        books = self._books.values()
        available = sum(1 for b in books if b.available)
        return {
            "total_books": len(self._books),
            "available_books": available,
            "on_loan_books": len(self._books) - available,
            "unique_authors": len({b.author for b in books}),
        }

    # ------------------------- Persistence ------------------------- #
    def serialize(self) -> str:
        """Encode the catalog as a JSON array of ``[isbn, record]`` pairs."""
        pairs = [[isbn, record.to_dict()] for isbn, record in self._books.items()]
        return json.dumps(pairs, ensure_ascii=False)

    @classmethod
    def deserialize(cls, data: str) -> "Catalog":
        """Rebuild a catalog from :meth:`serialize` output.

        The whole payload is rejected with ParseError if any entry is
        malformed; no partially loaded catalog is returned.
        """
        try:
            pairs = json.loads(data)
        except (TypeError, ValueError, RecursionError) as e:
            raise ParseError(f"Stored catalog is not valid JSON: {e}") from e

        if not isinstance(pairs, list):
            raise ParseError("Stored catalog must be a list of [isbn, book] pairs.")

        catalog = cls()
        for index, pair in enumerate(pairs):
            if not isinstance(pair, list) or len(pair) != 2:
                raise ParseError(f"Entry {index} is not an [isbn, book] pair.")
            isbn, raw = pair
            record = BookRecord.from_dict(raw)
            if isbn != record.isbn:
                raise ParseError(f"Entry {index} key '{isbn}' does not match book ISBN '{record.isbn}'.")
            try:
                catalog.add(record)
            except DuplicateKeyError as e:
                raise ParseError(f"Entry {index} repeats ISBN '{isbn}'.") from e
        return catalog

    # ------------------------- Utilities ------------------------- #
    def copy(self) -> "Catalog":
        clone = Catalog()
        clone._books = {isbn: replace(record) for isbn, record in self._books.items()}
        return clone

    def __len__(self) -> int:
        return len(self._books)

    def __contains__(self, isbn: object) -> bool:
        return isbn in self._books

    def __iter__(self) -> Iterator[BookRecord]:
        return iter(list(self._books.values()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Catalog):
            return NotImplemented
        return list(self._books.items()) == list(other._books.items())
