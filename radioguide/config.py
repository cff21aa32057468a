from pathlib import Path
import logging
import re

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from radioguide.utils.broadcast_clock import TimezoneError, load_timezone


logger = logging.getLogger(__name__)

_SECONDS_FILL_RE = re.compile(r"[0-5][0-9]")
_TIME_TOKEN_RE = re.compile(r"[0-9]{2,6}")


class CustomSettings(BaseSettings):
    """Application settings loaded from environment variables.

    Validates configuration at startup to catch misconfiguration early.
    """

    database_path: str = "./data/radioguide.db"
    log_level: str = "INFO"

    broadcast_timezone: str = "Asia/Tokyo"
    stream_delay_sec: int = 20  # Seconds the stream lags behind the wall clock
    start_seconds_fill: str = "05"  # Seconds used when a start token is HHmm
    end_seconds_fill: str = "29"  # Seconds used when an end token is HHmm
    day_start_token: str | None = "000000"  # Leading filler start; empty disables it
    feed_parse_timeout_sec: int = 60  # XML parsing timeout, 0 disables timeout

    sqlite_journal_mode: str = "WAL"
    sqlite_cache_size_kb: int = 64000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("database_path")
    @classmethod
    def validate_database_path(cls, value: str) -> str:
        """Validate database path is accessible."""
        path = Path(value)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            return value
        except (OSError, PermissionError) as exc:
            raise ValueError(f"Cannot access database path '{value}': {exc}") from exc

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate logging level name."""
        normalized = value.upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if normalized not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return normalized

    @field_validator("broadcast_timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Validate the broadcast timezone is a known IANA name."""
        try:
            load_timezone(value)
        except TimezoneError as exc:
            raise ValueError(str(exc)) from exc
        return value

    @field_validator("stream_delay_sec", "feed_parse_timeout_sec")
    @classmethod
    def validate_non_negative(cls, value: int, info) -> int:
        """Ensure second counts are non-negative."""
        if value < 0:
            raise ValueError(f"{info.field_name} must be >= 0")
        return value

    @field_validator("start_seconds_fill", "end_seconds_fill")
    @classmethod
    def validate_seconds_fill(cls, value: str, info) -> str:
        """Seconds fill must be two digits between 00 and 59."""
        if not _SECONDS_FILL_RE.fullmatch(value):
            raise ValueError(f"{info.field_name} must be two digits between 00 and 59")
        return value

    @field_validator("day_start_token", mode="before")
    @classmethod
    def validate_day_start(cls, value):
        """Empty string disables the leading filler."""
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        value = str(value).strip()
        if not _TIME_TOKEN_RE.fullmatch(value):
            raise ValueError("day_start_token must be 2-6 digits (HH, HHmm or HHmmss)")
        return value

    @field_validator("sqlite_journal_mode")
    @classmethod
    def validate_journal_mode(cls, value: str) -> str:
        """Validate SQLite journal mode."""
        normalized = value.upper()
        allowed = {"DELETE", "TRUNCATE", "PERSIST", "MEMORY", "WAL", "OFF"}
        if normalized not in allowed:
            raise ValueError(f"sqlite_journal_mode must be one of {sorted(allowed)}")
        return normalized

    @field_validator("sqlite_cache_size_kb")
    @classmethod
    def validate_cache_size(cls, value: int) -> int:
        """Ensure the SQLite cache size is positive."""
        if value <= 0:
            raise ValueError("sqlite_cache_size_kb must be > 0")
        return value

    def __init__(self, **data):
        """Initialize settings and log configuration."""
        super().__init__(**data)

        logger.info("Configuration loaded:")
        logger.info("  Database: %s", self.database_path)
        logger.info("  Broadcast Timezone: %s", self.broadcast_timezone)
        logger.info("  Stream Delay: %ss", self.stream_delay_sec)
        logger.info(
            "  Seconds Fill: start=%s end=%s",
            self.start_seconds_fill,
            self.end_seconds_fill,
        )
        logger.info("  Day Start Filler: %s", self.day_start_token or "disabled")
        logger.info(
            "  Parse Timeout: %s seconds",
            self.feed_parse_timeout_sec or "disabled",
        )
        logger.info("  SQLite Journal Mode: %s", self.sqlite_journal_mode)


settings = CustomSettings()


def setup_logging() -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
