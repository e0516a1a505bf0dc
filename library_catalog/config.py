import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Settings:
    # Storage Settings
    storage_backend: str = os.getenv("LIBRARY_STORAGE_BACKEND", "sqlite")
    data_file: str = os.getenv("LIBRARY_DATA_FILE", "library.db")
    storage_slot: str = os.getenv("LIBRARY_STORAGE_SLOT", "acervoBiblioteca")

    # API Settings
    api_host: str = os.getenv("API_HOST", "127.0.0.1")
    api_port: int = int(os.getenv("API_PORT", "8000"))

    # Application Settings
    app_name: str = os.getenv("APP_NAME", "Library Catalog")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "False").lower() in ("true", "1", "yes")
    log_level: str = os.getenv("LOG_LEVEL", "WARNING").upper()


settings = Settings()
