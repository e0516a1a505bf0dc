import logging
import subprocess
import sys
import webbrowser
from typing import Optional

import typer
from rich.console import Console

from library_catalog.config import settings
from library_catalog.errors import DuplicateKeyError, NotFoundError, StorageError
from library_catalog.library import Library
from library_catalog.catalog import SEARCH_KINDS
from library_catalog.ui_helpers import (
    set_output_mode,
    print_list_result,
    print_book_detail,
    print_stats_result,
)

console = Console(stderr=True)
logger = logging.getLogger(__name__)

# --- Typer CLI Application ---
app = typer.Typer(help=f"{settings.app_name} CLI")

def get_library() -> Library:
    """Open the configured catalog for this command, reporting a rejected load."""
    try:
        lib = Library.from_settings()
    except (StorageError, ValueError) as e:
        print(f"Storage error: {e}")
        raise typer.Exit(code=1)
    if lib.load_error is not None:
        console.print(f"[yellow]⚠️  Stored catalog was unreadable and has been ignored: {lib.load_error}[/]")
    return lib

@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    )
):
    """Global CLI options (e.g. output mode)."""
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.WARNING))
    if output:
        set_output_mode(output)

@app.command("list")
def cli_list():
    """List every book in insertion order."""
    lib = get_library()
    print_list_result(lib.list_books())

@app.command("add")
def cli_add(isbn: str, title: str, author: str, year: int):
    """Register a new book."""
    lib = get_library()
    try:
        book = lib.add_book(isbn, title, author, year)
    except DuplicateKeyError:
        print(f"Error: a book with ISBN {isbn} already exists!")
        raise typer.Exit(code=1)
    except ValueError as e:
        print(f"Error: {e}")
        raise typer.Exit(code=1)
    except StorageError as e:
        print(f"Storage error: {e}")
        raise typer.Exit(code=1)
    print(f"Successfully added: {book.title} by {book.author}")

@app.command("remove")
def cli_remove(
    isbn: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Remove a book by ISBN."""
    lib = get_library()
    if lib.find_book(isbn) is None:
        print(f"Book with ISBN {isbn} not found.")
        raise typer.Exit(code=1)
    if not yes and not typer.confirm(f"Are you sure you want to remove the book with ISBN {isbn}?"):
        print("Cancelled.")
        return
    try:
        lib.remove_book(isbn)
    except NotFoundError as e:
        print(str(e))
        raise typer.Exit(code=1)
    except StorageError as e:
        print(f"Storage error: {e}")
        raise typer.Exit(code=1)
    print(f"Book with ISBN {isbn} has been removed.")

@app.command("toggle")
def cli_toggle(isbn: str):
    """Lend or return a book (flip its availability)."""
    lib = get_library()
    try:
        book = lib.toggle_availability(isbn)
    except NotFoundError as e:
        print(str(e))
        raise typer.Exit(code=1)
    except StorageError as e:
        print(f"Storage error: {e}")
        raise typer.Exit(code=1)
    if book.available:
        print(f"Returned: {book.title} is available.")
    else:
        print(f"Lent: {book.title} is on loan.")

@app.command("find")
def cli_find(isbn: str):
    """Find a book by ISBN and show its details."""
    lib = get_library()
    book = lib.find_book(isbn)
    if book is None:
        print(f"Book with ISBN {isbn} not found.")
        raise typer.Exit(code=1)
    print_book_detail(book)

@app.command("search")
def cli_search(
    term: str,
    by: str = typer.Option("title", "--by", "-b", help="Search field: title | author | id"),
):
    """Search books by title, author or ISBN."""
    if by not in SEARCH_KINDS:
        print(f"Error: unknown search field '{by}'. Use one of: {', '.join(SEARCH_KINDS)}.")
        raise typer.Exit(code=1)
    lib = get_library()
    print_list_result(lib.search(term, by), empty_message="No books found.")

@app.command("stats")
def cli_stats():
    """Show catalog statistics."""
    lib = get_library()
    print_stats_result(lib.get_statistics())

@app.command("export")
def cli_export(
    format: str = typer.Option("csv", "--format", "-f", help="csv | json"),
    output: str = typer.Option("library_export", "--output-file", help="File name without extension"),
):
    """Export the catalog to a csv or json file."""
    lib = get_library()
    if not lib.list_books():
        print("No books to export.")
        return
    filename = f"{output}.{format.lower()}"
    try:
        count = lib.export_books(filename, format)
    except ValueError as e:
        print(f"Error: {e}")
        raise typer.Exit(code=1)
    except OSError as e:
        print(f"Could not write {filename}: {e}")
        raise typer.Exit(code=1)
    print(f"Exported {count} books to {filename}")

@app.command("serve")
def cli_serve(no_browser: bool = typer.Option(False, "--no-browser", help="Do not open a browser window")):
    """Start the HTTP API with uvicorn."""
    host = settings.api_host
    port = int(settings.api_port)
    url = f"http://{host}:{port}/docs"
    print(f"Starting web UI on {url}")
    if not no_browser:
        try:
            webbrowser.open(url)
        except webbrowser.Error as e:
            logger.warning(f"Could not open browser: {e}")
    args = [
        sys.executable,
        "-m", "uvicorn",
        "library_catalog.api:create_app",
        "--factory",
        "--host", host,
        "--port", str(port),
    ]
    try:
        subprocess.run(args)
    except KeyboardInterrupt:
        print("Server stopped.")

if __name__ == "__main__":
    app()
