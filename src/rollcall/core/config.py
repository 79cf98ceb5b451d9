"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class ImportConfig(BaseSettings):
    """Participant file import limits and tuning."""

    model_config = {"env_prefix": "ROLLCALL_IMPORT_"}

    max_file_bytes: int = 10 * 1024 * 1024
    allowed_extensions: list[str] = [".csv", ".txt", ".tsv"]
    id_width: int = 3  # zero padding for synthesized identifiers
    encoding_sample_chars: int = 4096
    sniff_lines: int = 5
    report_sample_size: int = 10


class RangeConfig(BaseSettings):
    """Bulk numeric-range generation."""

    model_config = {"env_prefix": "ROLLCALL_RANGE_"}

    max_span: int = 1000
    default_prefix: str = "参与者"


class RedisConfig(BaseSettings):
    """Redis roster store configuration."""

    model_config = {"env_prefix": "ROLLCALL_REDIS_"}

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    key_prefix: str = "rollcall:roster"
    lock_timeout: int = 60  # seconds


class S3Config(BaseSettings):
    """S3 upload storage configuration."""

    model_config = {"env_prefix": "ROLLCALL_S3_"}

    bucket: str = "rollcall-imports"
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override
    upload_prefix: str = "uploads/"


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "ROLLCALL_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"
    log_json: bool = False
    roster_backend: Literal["memory", "redis"] = "memory"

    importer: ImportConfig = ImportConfig()
    generator: RangeConfig = RangeConfig()
    redis: RedisConfig = RedisConfig()
    s3: S3Config = S3Config()
