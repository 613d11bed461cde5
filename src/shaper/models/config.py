"""Configuration models."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EngineConfig(BaseModel):
    """Resolution engine configuration."""
    base_url: str = Field(default="http://localhost:8080", description="Public URL exposed content is served under")
    namespace: str = Field(default="default", description="Namespace profiles and assignments are looked up in")
    request_timeout: float = Field(default=30.0, gt=0)
    max_concurrency: int = Field(default=0, ge=0, description="Concurrent items per batch, 0 for no bound")
    log_level: str = Field(default="INFO")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        """Normalize the base URL."""
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()


class WebhookClientConfig(BaseModel):
    """Outbound webhook client configuration."""
    timeout: float = Field(default=10.0, gt=0)
    disable_insecure_skip_verify: bool = Field(
        default=False, description="Enforce TLS verification even when a reference asks to skip it"
    )


class ShaperConfig(BaseModel):
    """Main configuration model."""
    engine: EngineConfig = Field(default_factory=EngineConfig)
    webhook: WebhookClientConfig = Field(default_factory=WebhookClientConfig)

    model_config = ConfigDict(extra="ignore")
