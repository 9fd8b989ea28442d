from pydantic_settings import BaseSettings
from pydantic import ConfigDict, field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache
from ..validators.field_validators import to_uppercase, to_lowercase

class Settings(BaseSettings):
    """
    Application settings loaded from environment.
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # Application
    APP_NAME: str = "Classroom API"
    API_PREFIX: str = "/api/v1"

    # Database configuration
    POSTGRES_DRIVER: str = "psycopg"
    POSTGRES_USERNAME: str = "classroom"
    POSTGRES_PASSWORD: str = "classroom"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "classroom"

    # Test database configuration
    TEST_POSTGRES_DB: str | None = None
    TESTING: bool = False

    # Any SQLAlchemy async URL (e.g. "sqlite+aiosqlite:///./classroom.db"); wins when set
    DATABASE_URL_OVERRIDE: str | None = None

    # SQLAlchemy
    SQLALCHEMY_ECHO: bool = False
    CREATE_TABLES_ON_STARTUP: bool = False

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/classroom")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False

    # --- Derived settings ---
    @property
    def DATABASE_URL(self) -> str:
        """
        Return the appropriate database URL based on the current environment.

        The logic is as follows:
        - If `DATABASE_URL_OVERRIDE` is set it is returned untouched. This is how a local
          SQLite file (or any other async driver) is selected.
        - If `TESTING=True` and `TEST_POSTGRES_DB` is provided, the URL points at the
          test database so tests never touch the production data.
        - Otherwise the regular Postgres database (`POSTGRES_DB`) is used.

        Returns:
            str: The constructed database connection URL.
        """
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE

        database = self.POSTGRES_DB
        if self.TESTING and self.TEST_POSTGRES_DB:
            database = self.TEST_POSTGRES_DB

        return (
            f"postgresql+{self.POSTGRES_DRIVER}://"
            f"{self.POSTGRES_USERNAME}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/"
            f"{database}"
        )

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Normalize the LOG_LEVEL environment variable value to uppercase.

        Runs before the Literal check (mode="before") so "debug" and "DEBUG" are both
        accepted; the logging module expects upper-case level names.
        """
        return to_uppercase(v)

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        """
        Normalize the LOG_FORMAT environment variable value to lowercase.
        """
        return to_lowercase(v)

    # --- ConfigDict settings ---
    model_config = ConfigDict(
        # .env lives at the src/ level, next to the classroom package
        env_file=str(Path(__file__).parent.parent.parent / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

# Settings come from the environment only, so one instance per process is enough.
@lru_cache()
def get_settings() -> Settings:
    return Settings()
