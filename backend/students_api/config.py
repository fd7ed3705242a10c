"""
Application settings read from environment variables.

All tunables live here so that `create_app()` can be given an explicit
`Settings` instance (tests use an in-memory SQLite database this way).
"""

import os
from dataclasses import dataclass, field
from typing import List

TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in TRUE_VALUES


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Settings:
    """Runtime configuration for the Students API."""

    # SQLite file for local development; point at PostgreSQL in production
    database_url: str = "sqlite:///./students.db"
    log_level: str = "INFO"
    create_tables: bool = True
    # When enabled, PUT on an unknown id creates the student with that id
    put_upsert: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            create_tables=_env_flag("CREATE_TABLES", cls.create_tables),
            put_upsert=_env_flag("STUDENTS_PUT_UPSERT", cls.put_upsert),
            cors_origins=_env_list("CORS_ORIGINS", "*"),
            host=os.getenv("HOST", cls.host),
            port=int(os.getenv("PORT", str(cls.port))),
        )
