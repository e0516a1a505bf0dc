import logging
from datetime import datetime, timezone
from typing import List, Optional, Literal

from fastapi import FastAPI, HTTPException, Depends, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from library_catalog.book import BookRecord
from library_catalog.config import settings
from library_catalog.errors import DuplicateKeyError, NotFoundError, StorageError
from library_catalog.library import Library

logger = logging.getLogger(__name__)

SearchKind = Literal["title", "author", "id"]


class BookIn(BaseModel):
    isbn: str = Field(..., min_length=1)
    title: str
    author: str
    year: int
    available: bool = True


class BookOut(BaseModel):
    isbn: str
    title: str
    author: str
    year: int
    available: bool

    @classmethod
    def from_record(cls, record: BookRecord) -> "BookOut":
        return cls(**record.to_dict())


class Stats(BaseModel):
    total_books: int
    available_books: int
    on_loan_books: int
    unique_authors: int


def get_library(request: Request) -> Library:
    return request.app.state.library


def create_app(library: Optional[Library] = None) -> FastAPI:
    """Build the API around ``library``, or the configured one if omitted."""
    app = FastAPI(title=settings.app_name, version=settings.app_version)
    app.state.library = library if library is not None else Library.from_settings()
    if app.state.library.load_error is not None:
        logger.warning(f"Starting with an empty catalog: {app.state.library.load_error}")

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(f"Storage failure on {request.url.path}: {exc}")
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    # --- Health Check ---
    @app.get("/health")
    def health(lib: Library = Depends(get_library)):
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "total_books": len(lib.list_books()),
            "load_error": str(lib.load_error) if lib.load_error else None,
        }

    # --- Books ---
    @app.get("/books", response_model=List[BookOut])
    def list_books(
        q: Optional[str] = Query(None, description="Search term"),
        by: SearchKind = Query("title", description="Search field"),
        lib: Library = Depends(get_library),
    ):
        books = lib.search(q, by) if q else lib.list_books()
        return [BookOut.from_record(b) for b in books]

    @app.get("/books/{isbn}", response_model=BookOut)
    def get_book(isbn: str, lib: Library = Depends(get_library)):
        book = lib.find_book(isbn)
        if book is None:
            raise HTTPException(status_code=404, detail=f"Book with ISBN {isbn} not found.")
        return BookOut.from_record(book)

    @app.post("/books", response_model=BookOut, status_code=201)
    def add_book(payload: BookIn, lib: Library = Depends(get_library)):
        try:
            book = lib.add_book(payload.isbn, payload.title, payload.author, payload.year, payload.available)
        except DuplicateKeyError as e:
            raise HTTPException(status_code=409, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
        return BookOut.from_record(book)

    @app.delete("/books/{isbn}", response_model=BookOut)
    def remove_book(isbn: str, lib: Library = Depends(get_library)):
        try:
            return BookOut.from_record(lib.remove_book(isbn))
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))

    @app.post("/books/{isbn}/toggle", response_model=BookOut)
    def toggle_book(isbn: str, lib: Library = Depends(get_library)):
        try:
            return BookOut.from_record(lib.toggle_availability(isbn))
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))

    @app.get("/stats", response_model=Stats)
    def stats(lib: Library = Depends(get_library)):
        return lib.get_statistics()

    return app
