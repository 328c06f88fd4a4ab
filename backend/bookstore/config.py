"""Application settings and validation."""

import os
from pathlib import Path

from sqlalchemy.engine import URL

BASE = Path(__file__).resolve().parent.parent
MIN_SECRET_LENGTH = 32


class Settings:
    ENV: str
    DATABASE_URL: str
    DB_HOST: str
    DB_PORT: int
    DB_USERNAME: str
    DB_PASSWORD: str
    DB_DATABASE: str
    JWT_SECRET: str
    JWT_ALGORITHM: str
    JWT_EXPIRE_HOURS: int
    SEED_ON_STARTUP: bool
    ALLOW_DEV_CORS: bool
    LOG_LEVEL: str
    LOGIN_MAX_FAILURES: int
    LOGIN_FAILURE_WINDOW_SECONDS: int

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", "")
        self.DB_HOST = os.getenv("DB_HOST", "")
        self.DB_PORT = int(os.getenv("DB_PORT", "5432"))
        self.DB_USERNAME = os.getenv("DB_USERNAME", "")
        self.DB_PASSWORD = os.getenv("DB_PASSWORD", "")
        self.DB_DATABASE = os.getenv("DB_DATABASE", "bookstore")
        self.JWT_SECRET = os.getenv("JWT_SECRET", "")
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.JWT_EXPIRE_HOURS = int(os.getenv("JWT_EXPIRE_HOURS", "24"))
        self.SEED_ON_STARTUP = os.getenv("SEED_ON_STARTUP", "true").lower() == "true"
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.LOGIN_MAX_FAILURES = int(os.getenv("LOGIN_MAX_FAILURES", "10"))
        self.LOGIN_FAILURE_WINDOW_SECONDS = int(os.getenv("LOGIN_FAILURE_WINDOW_SECONDS", "300"))
        self._validate()

    def _validate(self):
        # Tokens signed with an empty key would be trivially forgeable.
        if not self.JWT_SECRET.strip():
            raise RuntimeError("JWT_SECRET is not defined in environment variables")
        if self.ENV != "dev" and len(self.JWT_SECRET) < MIN_SECRET_LENGTH:
            raise RuntimeError(f"JWT_SECRET must be at least {MIN_SECRET_LENGTH} characters in non-dev environments")
        if self.JWT_EXPIRE_HOURS <= 0:
            raise RuntimeError("JWT_EXPIRE_HOURS must be a positive number of hours")

    @property
    def database_url(self) -> str:
        """Resolve the effective SQLAlchemy URL.

        `DATABASE_URL` wins; otherwise a PostgreSQL URL is assembled from
        the `DB_*` variables when `DB_HOST` is set, and a local SQLite file
        is used as the development fallback.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.DB_HOST:
            url = URL.create(
                "postgresql+psycopg",
                username=self.DB_USERNAME or None,
                password=self.DB_PASSWORD or None,
                host=self.DB_HOST,
                port=self.DB_PORT,
                database=self.DB_DATABASE,
            )
            return url.render_as_string(hide_password=False)
        return f"sqlite:///{BASE / 'bookstore.db'}"


settings = Settings()
