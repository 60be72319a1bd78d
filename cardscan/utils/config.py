"""Configuration and settings management."""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator
from pathlib import Path

from .error_handler import ConfigurationError

class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    # Scan gate timing
    STABILITY_WINDOW_MS: int = 400
    DEDUP_WINDOW_MS: int = 3000
    MIN_ACCEPT_SCORE: int = 45

    # Identification policy
    AUTO_CONFIRM_THRESHOLD: int = 80
    DISAMBIGUATION_MARGIN: int = 20
    MIN_CANDIDATE_SCORE: int = 20
    SEARCH_LIMIT: int = 3

    # Remote catalog search service
    CATALOG_API_URL: Optional[str] = None
    CATALOG_API_KEY: Optional[str] = None

    # Ledger storage used by the CLI
    LEDGER_PATH: str = "data/ledger.jsonl"

    @field_validator('CATALOG_API_URL', 'CATALOG_API_KEY', mode='before')
    @classmethod
    def validate_optional_strings(cls, v):
        """Convert empty/whitespace strings to None."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('LOG_LEVEL', mode='before')
    @classmethod
    def validate_log_level(cls, v):
        """Convert empty/whitespace strings to default."""
        if isinstance(v, str) and not v.strip():
            return "INFO"
        return v

    @field_validator('LOG_FORMAT', mode='before')
    @classmethod
    def validate_log_format(cls, v):
        """Only json and console renderers exist; blank means json."""
        if isinstance(v, str) and not v.strip():
            return "json"
        if isinstance(v, str) and v.strip().lower() not in ("json", "console"):
            raise ValueError("LOG_FORMAT must be 'json' or 'console'")
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator('LEDGER_PATH', mode='before')
    @classmethod
    def validate_ledger_path(cls, v):
        """Convert empty/whitespace strings to default."""
        if isinstance(v, str) and not v.strip():
            return "data/ledger.jsonl"
        return v

    @field_validator('STABILITY_WINDOW_MS', 'DEDUP_WINDOW_MS', mode='after')
    @classmethod
    def validate_window(cls, v):
        """Windows are durations and cannot be negative."""
        if v < 0:
            raise ValueError("window must be >= 0 ms")
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }

    def gate_config(self):
        """Build the scan gate configuration from these settings."""
        from ..scan.gate import GateConfig

        return GateConfig(
            stability_window=self.STABILITY_WINDOW_MS / 1000.0,
            dedup_window=self.DEDUP_WINDOW_MS / 1000.0,
            min_accept_score=self.MIN_ACCEPT_SCORE,
        )

# Global settings instance
settings = Settings()

def ensure_ledger_dir(ledger_path: Optional[str] = None) -> Path:
    """Ensure the directory holding the ledger file exists.

    Raises:
        ConfigurationError: If the path is a directory or its parent cannot be created
    """
    path = Path(ledger_path or settings.LEDGER_PATH)
    if path.is_dir():
        raise ConfigurationError("Ledger path is a directory", details={"path": str(path)})
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigurationError(
            "Cannot create ledger directory", details={"path": str(path.parent), "error": str(e)}
        ) from e
    return path
