"""Application settings and validation."""

import os
from pathlib import Path
from typing import Optional

from sqlalchemy.engine import URL

BASE = Path(__file__).resolve().parent.parent


class Settings:
    ENV: str
    DATABASE_URL: Optional[str]
    DB_HOST: Optional[str]
    DB_PORT: int
    DB_USER: Optional[str]
    DB_PASS: Optional[str]
    DB_NAME: Optional[str]
    DB_SCHEMA: Optional[str]
    DB_MAX_CONNECTIONS: int
    DB_POOL_TIMEOUT_SECONDS: float
    DB_STATEMENT_TIMEOUT_MS: int
    API_URL_BASE: str
    HTTP_SERVER_PORT: int
    LOG_LEVEL: str
    SQL_ECHO: bool

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL") or None
        self.DB_HOST = os.getenv("DB_HOST") or None
        self.DB_PORT = int(os.getenv("DB_PORT", "5432"))
        self.DB_USER = os.getenv("DB_USER") or None
        self.DB_PASS = os.getenv("DB_PASS") or None
        self.DB_NAME = os.getenv("DB_NAME") or None
        self.DB_SCHEMA = os.getenv("DB_SCHEMA") or None
        self.DB_MAX_CONNECTIONS = int(os.getenv("DB_MAX_CONNECTIONS", "10"))
        self.DB_POOL_TIMEOUT_SECONDS = float(os.getenv("DB_POOL_TIMEOUT_SECONDS", "30"))
        self.DB_STATEMENT_TIMEOUT_MS = int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "0"))  # 0 disables
        self.API_URL_BASE = os.getenv("API_URL_BASE", "/gsd/api/v1").rstrip("/")
        self.HTTP_SERVER_PORT = int(os.getenv("HTTP_SERVER_PORT", "8080"))
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"
        self._validate()

    @property
    def database_url(self) -> str:
        """Resolve the SQLAlchemy URL.

        `DATABASE_URL` wins; otherwise the `DB_*` parts build a PostgreSQL
        URL when `DB_HOST` is set; otherwise a local SQLite file is used.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.DB_HOST:
            url = URL.create(
                "postgresql+psycopg",
                username=self.DB_USER,
                password=self.DB_PASS,
                host=self.DB_HOST,
                port=self.DB_PORT,
                database=self.DB_NAME,
            )
            return url.render_as_string(hide_password=False)
        return f"sqlite:///{BASE / 'gsd.db'}"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def _validate(self):
        if self.DB_HOST and not self.DATABASE_URL:
            missing = [name for name in ("DB_USER", "DB_PASS", "DB_NAME") if not getattr(self, name)]
            if missing:
                raise RuntimeError(f"DB_HOST is set but {', '.join(missing)} not set")
        if self.ENV != "dev" and self.is_sqlite:
            raise RuntimeError("a PostgreSQL database must be configured in non-dev environments")
        if self.DB_MAX_CONNECTIONS < 1:
            raise RuntimeError("DB_MAX_CONNECTIONS must be >= 1")
        if self.DB_POOL_TIMEOUT_SECONDS <= 0:
            raise RuntimeError("DB_POOL_TIMEOUT_SECONDS must be > 0")
        if self.DB_STATEMENT_TIMEOUT_MS < 0:
            raise RuntimeError("DB_STATEMENT_TIMEOUT_MS must be >= 0")
        if self.API_URL_BASE and not self.API_URL_BASE.startswith("/"):
            raise RuntimeError("API_URL_BASE must start with '/'")


settings = Settings()
