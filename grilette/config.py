"""Grilette configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings

from grilette.storage import FileStore, KeyValueStore, MemoryStore, RedisStore


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "GRILETTE_",
    }

    # Storage
    storage_backend: Literal["file", "memory", "redis"] = "file"
    data_dir: Path = Path.home() / ".grilette"

    # Redis
    redis_url: str = "redis://localhost:6379/0"
    redis_prefix: str = "grilette:"

    # Repository
    refresh_last_modified: bool = True

    # MCP server
    server_host: str = "0.0.0.0"
    server_port: int = 8001
    log_level: str = "INFO"


def build_store(config: Settings) -> KeyValueStore:
    """Return the key-value backend selected by ``config.storage_backend``."""
    if config.storage_backend == "file":
        return FileStore(config.data_dir)
    if config.storage_backend == "memory":
        return MemoryStore()
    if config.storage_backend == "redis":
        store = RedisStore(config.redis_url, prefix=config.redis_prefix)
        store.connect()
        return store
    raise ValueError(f"Unknown storage backend: {config.storage_backend!r}")


settings = Settings()
