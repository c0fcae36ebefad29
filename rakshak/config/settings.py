"""
Centralized Configuration Management for Rakshak

Uses Pydantic Settings for type-safe environment variable loading.
Secrets (Gemini key, Twilio credentials) are only ever read from the
environment or a local .env file.
"""

from typing import Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Nested settings read os.environ directly, so .env has to land there first.
load_dotenv()


class ReasoningConfig(BaseSettings):
    """Primary tier (external reasoning service) configuration."""

    provider: str = Field(
        default="gemini",
        description="Reasoning provider: gemini, ollama or none"
    )
    timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Timeout for the single reasoning call per request"
    )

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        valid = ["gemini", "ollama", "none"]
        v_lower = v.lower()
        if v_lower not in valid:
            raise ValueError(f"provider must be one of {valid}")
        return v_lower

    model_config = SettingsConfigDict(
        env_prefix="REASONING_",
        case_sensitive=False
    )


class GeminiConfig(BaseSettings):
    """Google Gemini configuration."""

    api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key"
    )
    model: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model name"
    )
    base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Gemini REST API base URL"
    )

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        case_sensitive=False
    )


class OllamaConfig(BaseSettings):
    """Local Ollama configuration."""

    url: str = Field(
        default="http://localhost:11434",
        description="Ollama server URL"
    )
    model: str = Field(
        default="mistral",
        description="Ollama model name"
    )

    @field_validator("url")
    @classmethod
    def ensure_scheme(cls, v: str) -> str:
        # OLLAMA_URL is often given as 'ollama:11434'
        if v and not v.startswith("http"):
            return f"http://{v}"
        return v.rstrip("/")

    model_config = SettingsConfigDict(
        env_prefix="OLLAMA_",
        case_sensitive=False
    )


class TwilioConfig(BaseSettings):
    """Twilio SMS gateway configuration."""

    account_sid: Optional[str] = Field(
        default=None,
        description="Twilio account SID"
    )
    auth_token: Optional[str] = Field(
        default=None,
        description="Twilio auth token"
    )
    phone_number: Optional[str] = Field(
        default=None,
        description="Sender phone number"
    )
    base_url: str = Field(
        default="https://api.twilio.com",
        description="Twilio REST API base URL"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for the single SMS send attempt"
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.phone_number)

    model_config = SettingsConfigDict(
        env_prefix="TWILIO_",
        case_sensitive=False
    )


class RateLimitConfig(BaseSettings):
    """Request throttle for the analysis endpoint."""

    enabled: bool = Field(
        default=True,
        description="Enable rate limiting on /analyze"
    )
    window_seconds: int = Field(
        default=15 * 60,
        gt=0,
        description="Sliding window length"
    )
    max_requests: int = Field(
        default=50,
        gt=0,
        description="Requests allowed per client per window"
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False
    )


class ValidationConfig(BaseSettings):
    """Input validation limits."""

    location_max_length: int = Field(
        default=100,
        gt=0,
        description="Maximum sanitized location length"
    )
    max_body_bytes: int = Field(
        default=10 * 1024,
        gt=0,
        description="Maximum request body size"
    )

    model_config = SettingsConfigDict(
        env_prefix="VALIDATION_",
        case_sensitive=False
    )


class APIConfig(BaseSettings):
    """FastAPI server configuration."""

    host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    port: int = Field(
        default=3000,
        validation_alias=AliasChoices("API_PORT", "PORT"),
        description="API server port"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    enable_cors: bool = Field(
        default=True,
        description="Enable CORS"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper

    model_config = SettingsConfigDict(
        env_prefix="API_",
        case_sensitive=False
    )


class Config(BaseSettings):
    """Main application configuration."""

    environment: str = Field(
        default="development",
        description="Application environment: development, staging, production"
    )
    emergency_contact: Optional[str] = Field(
        default=None,
        description="Phone number that receives accident alerts"
    )

    reasoning: ReasoningConfig = Field(default_factory=ReasoningConfig)
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    ollama: OllamaConfig = Field(default_factory=OllamaConfig)
    twilio: TwilioConfig = Field(default_factory=TwilioConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    api: APIConfig = Field(default_factory=APIConfig)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        valid_envs = ["development", "staging", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"environment must be one of {valid_envs}")
        return v.lower()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def validate_required(self) -> None:
        """Validate that all required configuration is present for production."""
        if self.environment != "production":
            return
        if self.reasoning.provider == "gemini" and not self.gemini.api_key:
            raise ValueError("GEMINI_API_KEY is required in production")
        if not self.twilio.is_configured:
            raise ValueError(
                "TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN and TWILIO_PHONE_NUMBER are required in production"
            )
        if not self.emergency_contact:
            raise ValueError("EMERGENCY_CONTACT is required in production")


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        config = Config()
        config.validate_required()
        _config = config
    return _config


def reload_config() -> Config:
    """Reload configuration from environment (useful for testing)."""
    global _config
    config = Config()
    config.validate_required()
    _config = config
    return _config
