"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _load_env_file(path: str = ".env") -> None:
    """Populate os.environ from the provided .env file if it exists."""

    env_path = Path(path)
    if not env_path.exists():
        return

    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


@dataclass(frozen=True, slots=True)
class Settings:
    """Centralised project settings based on OS environment variables."""

    environment: str = "dev"
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./data/app.db"
    redis_url: str = "redis://localhost:6379/0"
    media_root: str = "data/media"
    public_base_url: str = "http://localhost:8000"

    replicate_api_token: str = ""
    replicate_model: str = "google/nano-banana"
    request_timeout: float = 60.0
    upload_slot_ttl: float = 3600.0


def _build_settings() -> Settings:
    _load_env_file()

    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        database_url=os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./data/app.db"),
        redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        media_root=os.getenv("MEDIA_ROOT", "data/media"),
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:8000"),
        replicate_api_token=os.getenv("REPLICATE_API_TOKEN", ""),
        replicate_model=os.getenv("REPLICATE_MODEL", "google/nano-banana"),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", "60")),
        upload_slot_ttl=float(os.getenv("UPLOAD_SLOT_TTL", "3600")),
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance to avoid re-reading configuration."""

    return _build_settings()
