# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings: LLM routing,
blob store and cache backends, download limits, logging and HTTP binding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Gemini models accepted for the paper chat component.
SUPPORTED_GEMINI_MODELS: tuple[str, ...] = (
    "gemini-2.5-flash-lite",
    "gemini-2.5-flash",
    "gemini-2.5-pro",
)


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === LLM PROVIDERS ===
    llm_default_provider: str = "google"
    llm_default_model: str = "gemini-2.5-flash-lite"
    llm_default_temperature: float = 0.2
    llm_max_output_tokens: int = 8192
    llm_timeout_s: float = 120.0

    # Provider API keys
    google_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("google_api_key", "gemini_api_key"),
    )
    openai_api_key: str = ""
    openai_base_url: str = ""

    # Per-component LLM assignment (provider:model, highest priority)
    llm_paper_chat: str = ""
    llm_spec_extractor: str = ""

    # === Remote blob store ===
    blob_store_backend: Literal["gemini", "local"] = "gemini"
    blob_store_root: Path = Path("~/.paperchat/blobs")

    # === Cache ===
    cache_backend: Literal["json", "sqlite"] = "json"
    cache_root: Path = Path("~/.paperchat/cache")
    cache_max_age_days: int = 30
    pdf_cache_enabled: bool = True

    # === Document limits ===
    max_document_size_mb: int = 2000
    download_timeout_s: float = 60.0
    download_user_agent: str = "Mozilla/5.0 (compatible; PaperChat/1.0)"

    # === Reference guide extraction ===
    spec_extract_max_input_chars: int = 60_000
    spec_extract_max_output_tokens: int = 2000
    spec_upload_max_size_mb: int = 10

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # === HTTP ===
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # --- Validators ---

    @field_validator("max_document_size_mb", "spec_upload_max_size_mb")
    @classmethod
    def validate_positive_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("size limits must be > 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if (
            self.llm_default_provider == "google"
            and self.llm_default_model not in SUPPORTED_GEMINI_MODELS
        ):
            errors.append(
                f"Invalid LLM_DEFAULT_MODEL: {self.llm_default_model}. "
                f"Valid options are: {', '.join(SUPPORTED_GEMINI_MODELS)}"
            )

        if self.llm_paper_chat.startswith("google:"):
            model = self.llm_paper_chat.split(":", 1)[1].strip()
            if model not in SUPPORTED_GEMINI_MODELS:
                errors.append(
                    f"Invalid LLM_PAPER_CHAT model: {model}. "
                    f"Valid options are: {', '.join(SUPPORTED_GEMINI_MODELS)}"
                )

        if self.cache_max_age_days < 1:
            errors.append("CACHE_MAX_AGE_DAYS must be >= 1")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def max_document_size_bytes(self) -> int:
        return self.max_document_size_mb * 1024 * 1024

    @property
    def spec_upload_max_size_bytes(self) -> int:
        return self.spec_upload_max_size_mb * 1024 * 1024

    @property
    def pdf_cache_dir(self) -> Path:
        """Directory holding validated source PDFs keyed by blob name."""
        return Path(self.cache_root).expanduser() / "pdfs"


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or the CLI).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
