"""Configuration management via environment variables.

Reads from .env file (via pydantic-settings) with sensible defaults.
All values can be overridden via environment variables.

Required for persistence:
    MONGODB_URI        - MongoDB connection string for the institution store

Optional:
    MONGODB_DATABASE       - Database name (default "bankexplorer")
    PEER_COUNT             - Larger/smaller peers selected on each side
    TOP_N                  - Banks processed by the all-banks peer batch
    IMPORT_WORKERS         - Worker threads used while importing a quarter
    MAX_CONCURRENT_WRITES  - Cap on simultaneous store writes
    STRICT_MISSING_FIELDS  - Resolve absent fields to None instead of 0
    PORT                   - MCP server port
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # MongoDB store for institutions and financial statements
    mongodb_uri: str = ""
    mongodb_database: str = "bankexplorer"

    # Peer analysis
    peer_count: int = 10
    top_n: int = 100

    # Import batch
    import_workers: int = 4
    max_concurrent_writes: int = 4
    progress_interval: int = 500

    # Accounting identities hold within one unit of record (thousands of $)
    validation_tolerance: float = 1.0

    # False keeps the historical behaviour where an unreported field reads as 0
    strict_missing_fields: bool = False

    port: int = 8877

    # Strip whitespace from string fields; the .env file often has
    # trailing spaces that break connection strings
    @field_validator("mongodb_uri", "mongodb_database", mode="before")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip().strip('"').strip("'").strip()
        return v

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


_config: Settings | None = None


def get_config() -> Settings:
    """Get or create the shared Settings singleton."""
    global _config
    if _config is None:
        _config = Settings()
    return _config
