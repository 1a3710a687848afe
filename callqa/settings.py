"""Explicit pipeline configuration.

Built once from the Flask config in ``create_app`` and handed to every client,
so nothing below the job layer reads the environment or ``current_app``.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class PipelineSettings:
    storage_backend: str = "local"
    local_storage_dir: str = "./storage"
    storage_public_base_url: str = "http://localhost:54321"
    s3_endpoint: Optional[str] = None
    s3_region: Optional[str] = None
    s3_access_key: Optional[str] = None
    s3_secret_key: Optional[str] = None

    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    transcription_model: str = "whisper-1"
    analysis_model: str = "gpt-4o-mini"
    analysis_temperature: float = 0.3
    analysis_max_tokens: int = 800
    analysis_max_attempts: int = 3
    analysis_backoff_base_ms: int = 1000
    analysis_backoff_cap_ms: int = 5000
    http_timeout_seconds: float = 60.0

    retry_settle_seconds: float = 1.0

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "PipelineSettings":
        defaults = cls()

        def pick(key, attr):
            value = config.get(key)
            return getattr(defaults, attr) if value is None else value

        return cls(
            storage_backend=pick("STORAGE_BACKEND", "storage_backend"),
            local_storage_dir=pick("LOCAL_STORAGE_DIR", "local_storage_dir"),
            storage_public_base_url=pick("STORAGE_PUBLIC_BASE_URL", "storage_public_base_url").rstrip("/"),
            s3_endpoint=config.get("S3_ENDPOINT"),
            s3_region=config.get("S3_REGION"),
            s3_access_key=config.get("S3_ACCESS_KEY"),
            s3_secret_key=config.get("S3_SECRET_KEY"),
            openai_api_key=config.get("OPENAI_API_KEY"),
            openai_base_url=pick("OPENAI_BASE_URL", "openai_base_url").rstrip("/"),
            transcription_model=pick("TRANSCRIPTION_MODEL", "transcription_model"),
            analysis_model=pick("ANALYSIS_MODEL", "analysis_model"),
            analysis_temperature=float(pick("ANALYSIS_TEMPERATURE", "analysis_temperature")),
            analysis_max_tokens=int(pick("ANALYSIS_MAX_TOKENS", "analysis_max_tokens")),
            analysis_max_attempts=max(1, int(pick("ANALYSIS_MAX_ATTEMPTS", "analysis_max_attempts"))),
            analysis_backoff_base_ms=int(pick("ANALYSIS_BACKOFF_BASE_MS", "analysis_backoff_base_ms")),
            analysis_backoff_cap_ms=int(pick("ANALYSIS_BACKOFF_CAP_MS", "analysis_backoff_cap_ms")),
            http_timeout_seconds=float(pick("HTTP_TIMEOUT_SECONDS", "http_timeout_seconds")),
            retry_settle_seconds=float(pick("RETRY_SETTLE_SECONDS", "retry_settle_seconds")),
        )
