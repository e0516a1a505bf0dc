import os
import pytest

from library_catalog.config import settings
from library_catalog.library import Library
from library_catalog.storage import MemoryStorage
from library_catalog.ui_helpers import OUTPUT_MODE_ENV

@pytest.fixture
def storage():
    return MemoryStorage()

@pytest.fixture
def lib(storage):
    return Library(storage, slot="acervoBiblioteca")

@pytest.fixture
def db_settings(tmp_path, request, monkeypatch):
    # Point the configured backend at a per-test SQLite file
    db_file = str(tmp_path / f"test_{request.node.name}.db")
    monkeypatch.setattr(settings, "storage_backend", "sqlite")
    monkeypatch.setattr(settings, "data_file", db_file)
    monkeypatch.setattr(settings, "storage_slot", "acervoBiblioteca")
    monkeypatch.delenv(OUTPUT_MODE_ENV, raising=False)
    yield settings
    if os.path.exists(db_file):
        os.remove(db_file)
