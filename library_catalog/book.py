from __future__ import annotations

from dataclasses import dataclass

from library_catalog.errors import ParseError


@dataclass
class BookRecord:
    """A single entry of the catalog, keyed by ISBN.

    Field types are checked on construction, so every record that reaches
    the catalog can be written out and read back by :meth:`from_dict`.
    """

    isbn: str
    title: str
    author: str
    year: int
    available: bool = True

    def __post_init__(self) -> None:
        for field_name in ("isbn", "title", "author"):
            if not isinstance(getattr(self, field_name), str):
                raise ValueError(f"Field '{field_name}' must be a string.")
        if not self.isbn.strip():
            raise ValueError("ISBN cannot be empty.")
        # bool is a subclass of int; a true/false year is still malformed
        if isinstance(self.year, bool) or not isinstance(self.year, int):
            raise ValueError("Field 'year' must be an integer.")
        if not isinstance(self.available, bool):
            raise ValueError("Field 'available' must be a boolean.")

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        status = "available" if self.available else "on loan"
        return f"{self.title} by {self.author} ({self.year}, ISBN: {self.isbn}, {status})"

    def to_dict(self) -> dict:
        return {
            "isbn": self.isbn,
            "title": self.title,
            "author": self.author,
            "year": self.year,
            "available": self.available,
        }

    @staticmethod
    def from_dict(data: dict) -> "BookRecord":
        """Build a record from decoded storage data.

        Raises ParseError instead of producing a record with missing or
        wrongly typed fields. A missing ``available`` flag defaults to True.
        """
        if not isinstance(data, dict):
            raise ParseError(f"Book entry must be an object, got {type(data).__name__}.")

        for field_name in ("isbn", "title", "author", "year"):
            if field_name not in data:
                raise ParseError(f"Book entry is missing required field '{field_name}'.")

        try:
            return BookRecord(
                isbn=data["isbn"],
                title=data["title"],
                author=data["author"],
                year=data["year"],
                available=data.get("available", True),
            )
        except ValueError as e:
            raise ParseError(str(e)) from e
