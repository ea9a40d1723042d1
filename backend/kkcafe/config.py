"""
KK's Cafe Backend - Application Configuration
==============================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by main.py and the store factory; tests build their own
       Settings instances with explicit overrides.
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for running the cafe locally.
    Attributes are grouped by concern for readability.
    """

    # ── Record Store ──────────────────────────────────────────────────────
    # What: Which DrinkStore implementation backs the menu
    # Values: "json" (flat file, default) or "sql" (embedded SQLite)
    store_backend: str = Field(default="json")

    # What: Path of the JSON document holding the full drink list
    data_file: str = Field(default="./data.json")

    # What: Async SQLAlchemy URL used when store_backend == "sql"
    database_url: str = Field(
        default="sqlite+aiosqlite:///./drinks.db",
        description="Async database URL for the SQL drink store",
    )

    # ── File Storage ──────────────────────────────────────────────────────
    # What: Directory holding uploaded drink images
    upload_dir: str = Field(default="./uploads")

    # What: Public URL path the upload directory is served under.
    # Every local image reference stored on a drink starts with "<prefix>/".
    uploads_url_prefix: str = Field(default="/uploads")

    # What: Optional static front-end served at "/" when the directory exists
    public_dir: str = Field(default="./public")

    # What: Maximum size of a single uploaded image in bytes (5MB)
    max_file_size: int = Field(default=5_242_880, ge=1024, le=52_428_800)

    # What: Maximum number of image parts accepted per create/update request
    max_files_per_request: int = Field(default=10, ge=1, le=50)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated origins, "*" allows any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        """Only the backends the store factory knows how to build."""
        lower = v.lower()
        if lower not in {"json", "sql"}:
            raise ValueError(f"Invalid store_backend '{v}'. Must be 'json' or 'sql'")
        return lower

    @field_validator("uploads_url_prefix")
    @classmethod
    def validate_uploads_url_prefix(cls, v: str) -> str:
        """Normalizes to a leading slash and no trailing slash ("/uploads")."""
        stripped = v.strip().strip("/")
        if not stripped:
            raise ValueError("uploads_url_prefix must not be empty or '/'")
        return f"/{stripped}"

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # DATA_FILE and data_file both work
    }


# Singleton instance used by the module-level application
settings = Settings()
