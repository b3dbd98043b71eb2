"""
Runtime configuration for the flow-ops backend.

Values come from environment variables (optionally a local .env file).
A single Settings instance is built at startup and handed to each request
through the operation context, so tests can swap credentials and poll
timings without touching the process environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_str(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip()
    return value or default


def _env_int(name: str, default: int) -> int:
    raw = _env_str(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = _env_str(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    # Provider credentials
    gemini_api_key: str | None = None
    openai_api_key: str | None = None
    assemblyai_api_key: str | None = None

    # Login credential pair and the token issued for it
    auth_username: str | None = None
    auth_password: str | None = None
    auth_token: str | None = None

    # Long-running operation polling
    video_poll_interval: float = 10.0
    video_poll_max_attempts: int = 36
    transcribe_poll_interval: float = 5.0
    transcribe_poll_max_attempts: int = 120

    http_timeout: float = 120.0
    log_level: str = "INFO"
    cors_origin_regex: str = r"^http:\/\/localhost:\d+$|^http:\/\/127\.0\.0\.1:\d+$"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current environment."""
        return cls(
            gemini_api_key=_env_str("GEMINI_API_KEY"),
            openai_api_key=_env_str("OPENAI_API_KEY"),
            assemblyai_api_key=_env_str("ASSEMBLYAI_API_KEY"),
            auth_username=_env_str("FLOWOPS_USERNAME"),
            auth_password=_env_str("FLOWOPS_PASSWORD"),
            auth_token=_env_str("FLOWOPS_AUTH_TOKEN"),
            video_poll_interval=_env_float("VIDEO_POLL_INTERVAL_SECONDS", 10.0),
            video_poll_max_attempts=_env_int("VIDEO_POLL_MAX_ATTEMPTS", 36),
            transcribe_poll_interval=_env_float("TRANSCRIBE_POLL_INTERVAL_SECONDS", 5.0),
            transcribe_poll_max_attempts=_env_int("TRANSCRIBE_POLL_MAX_ATTEMPTS", 120),
            http_timeout=_env_float("HTTP_TIMEOUT_SECONDS", 120.0),
            log_level=(_env_str("LOG_LEVEL", "INFO") or "INFO").upper(),
            cors_origin_regex=_env_str("CORS_ORIGIN_REGEX", cls.cors_origin_regex),
        )

    def require(self, name: str) -> str:
        """
        Return a configured secret or fail with a configuration error.

        Args:
            name: Attribute name, e.g. "gemini_api_key"
        """
        from .errors import ConfigurationError

        value = getattr(self, name)
        if not value:
            raise ConfigurationError(
                f"Missing {name.upper()}. Set it in backend/.env to enable this operation."
            )
        return value
