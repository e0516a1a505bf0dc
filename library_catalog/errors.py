class CatalogError(Exception):
    """Base class for every catalog failure."""


class DuplicateKeyError(CatalogError):
    def __init__(self, isbn: str) -> None:
        self.isbn = isbn
        super().__init__(f"Book with ISBN {isbn} already exists.")


class NotFoundError(CatalogError):
    def __init__(self, isbn: str) -> None:
        self.isbn = isbn
        super().__init__(f"Book with ISBN {isbn} not found.")


class ParseError(CatalogError):
    """Persisted catalog data is not valid or a record entry is malformed."""


class StorageError(CatalogError):
    """The persistence backend could not be read or written."""
