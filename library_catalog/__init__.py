"""Library Catalog - Core Application Package

This package contains the catalog application modules including:
- Book records (book.py)
- Catalog state and serialization (catalog.py)
- Key-value persistence slot (storage.py)
- Intent dispatch and persistence (library.py)
- CLI interface (main.py) and HTTP API (api.py)
"""

from library_catalog.book import BookRecord
from library_catalog.catalog import Catalog
from library_catalog.errors import (
    CatalogError,
    DuplicateKeyError,
    NotFoundError,
    ParseError,
    StorageError,
)
from library_catalog.library import Library

__all__ = [
    "BookRecord",
    "Catalog",
    "CatalogError",
    "DuplicateKeyError",
    "NotFoundError",
    "ParseError",
    "StorageError",
    "Library",
]
