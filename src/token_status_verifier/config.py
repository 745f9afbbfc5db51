"""Verifier settings loaded from the environment.

Environment variables use the TOKEN_STATUS_ prefix, e.g.
TOKEN_STATUS_TOKEN_FORMAT=cwt or TOKEN_STATUS_ALLOWED_CLOCK_SKEW_SECONDS=30.
"""

from datetime import timedelta
import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .fetch import StatusListTokenFormat


class VerifierSettings(BaseSettings):
    """Settings of a TokenStatusListVerifier."""

    model_config = SettingsConfigDict(
        env_prefix="TOKEN_STATUS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    token_format: StatusListTokenFormat = Field(
        default=StatusListTokenFormat.JWT,
        description="Envelope of the status list tokens: jwt or cwt",
    )
    allowed_clock_skew_seconds: int = Field(
        default=0, ge=0, description="Tolerance applied to iat and exp checks"
    )
    http_timeout_seconds: float = Field(default=30.0, gt=0)
    log_level: str = Field(default="WARNING")

    @field_validator("token_format", mode="before")
    @classmethod
    def lower_token_format(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @property
    def allowed_clock_skew(self) -> timedelta:
        return timedelta(seconds=self.allowed_clock_skew_seconds)


def configure_logging(settings: VerifierSettings):
    """Configure root logging for applications embedding the verifier."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
