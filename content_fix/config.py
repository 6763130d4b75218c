"""
Centralized configuration with validation.

Uses pydantic-settings to load and validate environment variables once.
The correction engine itself is configured through the explicit dataclasses
below; `from_settings()` is the only place environment values flow into them.
"""

from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from content_fix.constants import CorrectionDefaults, IntegrityThresholds

LOG_LEVELS = ("debug", "info", "warning", "error")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Provider selection
    DEFAULT_PROVIDER: str = Field(
        default="groq",
        description="Primary generation provider: groq, openai, anthropic, gemini, mock",
    )
    BACKUP_PROVIDERS: str = Field(
        default="",
        description="Comma-separated list of failover providers, tried in order",
    )
    DISABLED_PROVIDERS: str = Field(
        default="",
        description="Comma-separated list of providers to skip even if configured",
    )

    # Provider credentials and models
    OPENAI_API_KEY: str | None = Field(default=None, description="OpenAI API key")
    OPENAI_MODEL: str = Field(default="gpt-4o-mini", description="OpenAI model for corrections")
    ANTHROPIC_API_KEY: str | None = Field(default=None, description="Anthropic API key")
    ANTHROPIC_MODEL: str = Field(default="claude-haiku-4-5", description="Anthropic model for corrections")
    GOOGLE_API_KEY: str | None = Field(default=None, description="Google/Gemini API key")
    GEMINI_API_KEY: str | None = Field(default=None, description="Alternative Gemini API key env var")
    GEMINI_MODEL: str = Field(default="gemini-2.0-flash", description="Gemini model for corrections")
    GROQ_API_KEY: str | None = Field(default=None, description="Groq API key")
    GROQ_MODEL: str = Field(default="llama-3.3-70b-versatile", description="Groq model for corrections")

    # Correction engine
    CORRECTION_MAX_RETRY_ATTEMPTS: int = Field(
        default=CorrectionDefaults.MAX_ATTEMPTS_PER_PROMPT,
        ge=1,
        description="Attempts per provider for each correction prompt",
    )
    CORRECTION_ENABLE_FAILOVER: bool = Field(default=True, description="Try backup providers on failure")
    CORRECTION_ENABLE_VALIDATION: bool = Field(default=True, description="Validate every correction")
    CORRECTION_TIMEOUT_SECONDS: int = Field(
        default=CorrectionDefaults.TIMEOUT_SECONDS,
        ge=1,
        description="Per-call backend timeout",
    )
    CORRECTION_RETRY_DELAY_SECONDS: float = Field(
        default=CorrectionDefaults.RETRY_DELAY_SECONDS,
        ge=0,
        description="Pause between attempts against the same provider",
    )
    CORRECTION_MIN_IMPROVEMENT_PERCENT: float = Field(
        default=CorrectionDefaults.MIN_IMPROVEMENT_PERCENT,
        ge=0,
        description="Relative metric improvement for a prompt to count as effective",
    )

    # Structure preservation
    PRESERVER_ENABLE_ROLLBACK: bool = Field(default=True, description="Roll back on major violations")
    PRESERVER_MAX_SNAPSHOTS: int = Field(
        default=IntegrityThresholds.MAX_SNAPSHOTS,
        ge=1,
        description="Snapshots kept for rollback (oldest evicted first)",
    )

    # Logging
    LOG_LEVEL: str = Field(default="info", description="debug, info, warning, error")
    LOG_JSON: bool = Field(default=False, description="Emit single-line JSON logs")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the log level name."""
        level = v.lower().strip()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {LOG_LEVELS}, got '{v}'")
        return level

    @field_validator("DEFAULT_PROVIDER")
    @classmethod
    def normalize_provider(cls, v: str) -> str:
        return v.lower().strip()

    @property
    def provider_order(self) -> list[str]:
        """Default provider first, then backups, de-duplicated."""
        order: list[str] = []
        candidates = [self.DEFAULT_PROVIDER] + self.BACKUP_PROVIDERS.split(",")
        for name in candidates:
            name = name.lower().strip()
            if name and name not in order:
                order.append(name)
        return order

    @property
    def disabled_providers(self) -> set[str]:
        return {p.lower().strip() for p in self.DISABLED_PROVIDERS.split(",") if p.strip()}

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


@dataclass(frozen=True)
class CorrectorConfig:
    """Configuration for the correction orchestrator."""

    max_retry_attempts: int = CorrectionDefaults.MAX_ATTEMPTS_PER_PROMPT
    enable_provider_failover: bool = True
    enable_correction_validation: bool = True
    timeout_seconds: int = CorrectionDefaults.TIMEOUT_SECONDS
    min_improvement_threshold_percent: float = CorrectionDefaults.MIN_IMPROVEMENT_PERCENT
    log_level: str = "info"

    retry_delay_seconds: float = CorrectionDefaults.RETRY_DELAY_SECONDS
    temperature: float = CorrectionDefaults.TEMPERATURE
    max_tokens: int = CorrectionDefaults.MAX_TOKENS
    history_capacity: int = CorrectionDefaults.HISTORY_CAPACITY

    def __post_init__(self):
        if self.max_retry_attempts < 1:
            raise ValueError("max_retry_attempts must be at least 1")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}")
        if self.history_capacity < 1:
            raise ValueError("history_capacity must be at least 1")

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "CorrectorConfig":
        settings = settings or get_settings()
        return cls(
            max_retry_attempts=settings.CORRECTION_MAX_RETRY_ATTEMPTS,
            enable_provider_failover=settings.CORRECTION_ENABLE_FAILOVER,
            enable_correction_validation=settings.CORRECTION_ENABLE_VALIDATION,
            timeout_seconds=settings.CORRECTION_TIMEOUT_SECONDS,
            min_improvement_threshold_percent=settings.CORRECTION_MIN_IMPROVEMENT_PERCENT,
            log_level=settings.LOG_LEVEL,
            retry_delay_seconds=settings.CORRECTION_RETRY_DELAY_SECONDS,
        )


@dataclass(frozen=True)
class PreserverConfig:
    """Configuration for the structure preserver."""

    enable_rollback: bool = True
    max_snapshots: int = IntegrityThresholds.MAX_SNAPSHOTS
    enable_checksums: bool = True
    preserve_formatting: bool = True
    preserve_structure: bool = True
    preserve_intent: bool = True
    strict_validation: bool = True  # Minor violations also invalidate
    log_level: str = "info"

    structure_cache_size: int = IntegrityThresholds.STRUCTURE_CACHE_SIZE
    similarity_threshold: float = IntegrityThresholds.TITLE_SIMILARITY_MIN_PCT
    history_capacity: int = CorrectionDefaults.HISTORY_CAPACITY

    def __post_init__(self):
        if self.max_snapshots < 1:
            raise ValueError("max_snapshots must be at least 1")
        if self.structure_cache_size < 1:
            raise ValueError("structure_cache_size must be at least 1")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}")

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "PreserverConfig":
        settings = settings or get_settings()
        return cls(
            enable_rollback=settings.PRESERVER_ENABLE_ROLLBACK,
            max_snapshots=settings.PRESERVER_MAX_SNAPSHOTS,
            log_level=settings.LOG_LEVEL,
        )
