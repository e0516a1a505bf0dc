import csv
import json
import logging
from typing import List, Optional, Dict, Any

from library_catalog.book import BookRecord
from library_catalog.catalog import Catalog
from library_catalog.config import settings
from library_catalog.errors import ParseError, StorageError
from library_catalog.storage import KeyValueStorage, create_storage

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("csv", "json")


class Library:
    """Owns a Catalog and writes it back to its storage slot after every change.

    Loading follows an all-or-nothing policy: if the stored payload is
    corrupt the catalog starts empty and the ParseError is kept in
    ``load_error`` for the caller to report.
    """

    def __init__(self, storage: KeyValueStorage, slot: Optional[str] = None) -> None:
        self.storage = storage
        self.slot = slot or settings.storage_slot
        self.catalog = Catalog()
        self.load_error: Optional[ParseError] = None
        self.reload()

    @classmethod
    def from_settings(cls) -> "Library":
        """Build a Library from the configured backend, file and slot."""
        storage = create_storage(settings.storage_backend, settings.data_file)
        return cls(storage, slot=settings.storage_slot)

    # ------------------------- Intents ------------------------- #
    def add_book(self, isbn: str, title: str, author: str, year: int, available: bool = True) -> BookRecord:
        """Register a new book from form fields. Prevent duplicates by ISBN."""
        record = BookRecord(
            isbn=(isbn or "").strip(),
            title=(title or "").strip(),
            author=(author or "").strip(),
            year=int(year),
            available=available,
        )
        return self.add_record(record)

    def add_record(self, record: BookRecord) -> BookRecord:
        self._mutate(lambda catalog: catalog.add(record))
        logger.info(f"Added book {record.isbn}: {record.title}")
        return record

    def remove_book(self, isbn: str) -> BookRecord:
        removed = self._mutate(lambda catalog: catalog.remove(isbn))
        logger.info(f"Removed book {isbn}")
        return removed

    def toggle_availability(self, isbn: str) -> BookRecord:
        record = self._mutate(lambda catalog: catalog.toggle_availability(isbn))
        logger.info(f"Book {isbn} is now {'available' if record.available else 'on loan'}")
        return record

    # ------------------------- Queries ------------------------- #
    def find_book(self, isbn: str) -> Optional[BookRecord]:
        return self.catalog.get_by_id(isbn)

    def list_books(self) -> List[BookRecord]:
        return self.catalog.list_all()

    def search_by_title(self, term: str) -> List[BookRecord]:
        return self.catalog.search_by_title(term)

    def search_by_author(self, term: str) -> List[BookRecord]:
        return self.catalog.search_by_author(term)

    def search(self, term: str, by: str = "title") -> List[BookRecord]:
        return self.catalog.search(term, by)

    def get_statistics(self) -> Dict[str, Any]:
        return self.catalog.get_statistics()

    # ------------------------- Persistence ------------------------- #
    def save(self) -> None:
        self.storage.set_item(self.slot, self.catalog.serialize())

    def reload(self) -> None:
        """Replace the in-memory catalog with the stored one.

        StorageError propagates; a corrupt payload leaves an empty catalog.
        """
        data = self.storage.get_item(self.slot)
        self.load_error = None
        if not data:
            self.catalog = Catalog()
            return
        try:
            self.catalog = Catalog.deserialize(data)
        except ParseError as e:
            logger.warning(f"Discarding corrupt catalog in slot '{self.slot}': {e}")
            self.catalog = Catalog()
            self.load_error = e
            return
        logger.info(f"Loaded {len(self.catalog)} books from slot '{self.slot}'")

    def _mutate(self, operation):
        """Apply ``operation`` to the catalog and persist it.

        A failed write restores the catalog as it was before the call.
        """
        snapshot = self.catalog.copy()
        result = operation(self.catalog)
        try:
            self.save()
        except StorageError:
            logger.error(f"Could not persist catalog to slot '{self.slot}', rolling back")
            self.catalog = snapshot
            raise
        return result

    # ------------------------- Export ------------------------- #
    def export_books(self, path: str, fmt: str = "csv") -> int:
        """Write every book to ``path`` as csv or json. Returns the book count."""
        fmt = fmt.lower()
        if fmt not in EXPORT_FORMATS:
            raise ValueError(f"Unsupported format: {fmt}. Use csv or json.")

        books = self.list_books()
        if fmt == "csv":
            with open(path, "w", newline="", encoding="utf-8") as csvfile:
                writer = csv.writer(csvfile)
                writer.writerow(["ISBN", "Title", "Author", "Year", "Available"])
                for book in books:
                    writer.writerow([book.isbn, book.title, book.author, book.year, book.available])
        else:
            with open(path, "w", encoding="utf-8") as jsonfile:
                json.dump([book.to_dict() for book in books], jsonfile, indent=2, ensure_ascii=False)
        return len(books)
