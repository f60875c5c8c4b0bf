import re
from datetime import timedelta
from functools import lru_cache

from pydantic_settings import BaseSettings
from pydantic import field_validator, model_validator

TOKEN_KEY_LENGTH = 32
SUPPORTED_DB_DRIVERS = ("mysql", "sqlite")

_DURATION_UNITS = {
    "h": 3600.0,
    "m": 60.0,
    "s": 1.0,
    "ms": 0.001,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")


def parse_duration(value) -> timedelta:
    """Parse a duration literal such as "15m", "1h30m" or "90s".

    A bare number is read as seconds.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)

    text = str(value).strip()
    if not text:
        raise ValueError("duration must not be empty")
    if re.fullmatch(r"\d+(?:\.\d+)?", text):
        return timedelta(seconds=float(text))

    seconds = 0.0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()
    if position != len(text):
        raise ValueError(f"invalid duration {text!r}")
    return timedelta(seconds=seconds)


class Settings(BaseSettings):
    # Database
    db_driver: str = "mysql"
    db_source: str = "root:secret@localhost:3306/job_search?charset=utf8mb4"

    # Server
    server_address: str = "0.0.0.0:8080"
    app_url: str = "http://localhost:8080"

    # Search
    elasticsearch_address: str = "http://localhost:9200"
    elasticsearch_index: str = "jobs"
    elasticsearch_timeout_seconds: int = 10
    search_bulk_load_on_startup: bool = True

    # Auth
    token_symmetric_key: str = "change-me-in-production-32-chars"
    access_token_duration: timedelta = timedelta(minutes=15)

    # Email
    email_sender_address: str = "no-reply@jobsearch.local"
    smtp_host: str = "localhost"
    smtp_port: int = 1025
    smtp_user: str = ""
    smtp_password: str = ""
    verify_email_expiry_minutes: int = 15

    # Task queue
    redis_address: str = "localhost:6379"
    outbox_dispatch_interval_seconds: int = 5
    outbox_batch_size: int = 100
    outbox_max_attempts: int = 10
    outbox_retention_days: int = 7
    enable_scheduler: bool = False

    # App
    environment: str = "development"

    @field_validator("access_token_duration", mode="before")
    @classmethod
    def parse_access_token_duration(cls, v):
        return parse_duration(v)

    @field_validator("db_driver")
    @classmethod
    def validate_db_driver(cls, v: str) -> str:
        if v not in SUPPORTED_DB_DRIVERS:
            raise ValueError(f"DB_DRIVER must be one of {', '.join(SUPPORTED_DB_DRIVERS)}")
        return v

    @field_validator("token_symmetric_key")
    @classmethod
    def validate_token_key_length(cls, v: str) -> str:
        if len(v) != TOKEN_KEY_LENGTH:
            raise ValueError(
                f"TOKEN_SYMMETRIC_KEY must be exactly {TOKEN_KEY_LENGTH} characters"
            )
        return v

    @model_validator(mode="after")
    def validate_token_key(self) -> "Settings":
        """Ensure the signing key was changed in non-development environments."""
        if (
            self.environment != "development"
            and self.token_symmetric_key == "change-me-in-production-32-chars"
        ):
            raise ValueError(
                f"TOKEN_SYMMETRIC_KEY must be set to a secure value in {self.environment} environment. "
                "Generate one with: openssl rand -hex 16"
            )
        return self

    @property
    def database_url(self) -> str:
        if "://" in self.db_source:
            return self.db_source
        return f"{self.db_driver}://{self.db_source}"

    @property
    def redis_url(self) -> str:
        if "://" in self.redis_address:
            return self.redis_address
        return f"redis://{self.redis_address}/0"

    @property
    def scheduler_enabled(self) -> bool:
        return self.environment == "production" or self.enable_scheduler

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
