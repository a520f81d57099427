"""
CSV Analyzer Backend Configuration

Supports two analysis modes:
- local: profile rows in-process (default)
- remote: forward rows to another CSV Analyzer instance over HTTP

Set via environment variables or .env file.
"""
from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache
from typing import Literal


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # App
    APP_NAME: str = "CSV Analyzer"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    LOGS_DIR: Path = Path("./logs")

    # Upload limits
    MAX_UPLOAD_SIZE_MB: int = 10
    ALLOWED_EXTENSIONS: set[str] = {".csv", ".tsv", ".json", ".jsonl", ".ndjson", ".parquet"}
    MAX_ROWS: int = 0  # 0 = unlimited

    # ===================
    # Profiling
    # ===================
    DEFAULT_BUCKETS: int = 12
    MAX_BUCKETS: int = 100

    # "local" runs the profiler in-process, "remote" calls ANALYSIS_URL
    ANALYSIS_MODE: Literal["local", "remote"] = "local"
    ANALYSIS_URL: str = "http://localhost:3000"
    REQUEST_TIMEOUT: float = 30.0  # seconds

    # ===================
    # CORS
    # ===================
    # Comma-separated in .env, parsed as list
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def max_upload_bytes(self) -> int:
        """Max upload size in bytes"""
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def is_remote(self) -> bool:
        """Check if analysis is delegated to a remote instance"""
        return self.ANALYSIS_MODE == "remote"

    @field_validator("LOGS_DIR", mode="before")
    @classmethod
    def ensure_path(cls, v):
        """Convert string to Path"""
        return Path(v) if isinstance(v, str) else v

    @field_validator("DEFAULT_BUCKETS", "MAX_BUCKETS")
    @classmethod
    def positive_buckets(cls, v):
        if v < 1:
            raise ValueError("bucket counts must be >= 1")
        return v

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance"""
    return Settings()


settings = get_settings()
