"""
Centralized configuration for WebPageCheck.

Goal:
- One typed source of truth for the checker's knobs (HTTP, resolution loop, output, logging).
- Environment variables and an optional `.env` file feed the same settings class; CLI flags override on top.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from WebPageCheck.exceptions import ConfigurationError


_REPO_ROOT = Path(__file__).resolve().parents[1]

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 6.1; Win64; x64; rv:47.0) Gecko/20100101 Firefox/47.0"

_COLOR_MODES = {"auto", "always", "never"}


def _env_file_candidates() -> list[Path]:
    # Order matters: working directory .env first, then repo-root .env (if any).
    return [
        Path.cwd() / ".env",
        _REPO_ROOT / ".env",
    ]


class CheckerConfig(BaseSettings):
    """Configuration for the web page checker (HTTP client, resolution loop, report, logging)."""

    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    # -------------------------
    # HTTP client
    # -------------------------
    user_agent: str = Field(default=DEFAULT_USER_AGENT, validation_alias=AliasChoices("WEBPAGECHECK_USER_AGENT", "USER_AGENT"))
    timeout_seconds: float = Field(default=30.0, validation_alias=AliasChoices("WEBPAGECHECK_TIMEOUT_SECONDS", "WEBPAGECHECK_TIMEOUT"))
    max_retries: int = Field(default=2, validation_alias=AliasChoices("WEBPAGECHECK_MAX_RETRIES"))
    verify_tls: bool = Field(default=True, validation_alias=AliasChoices("WEBPAGECHECK_VERIFY_TLS"))

    # -------------------------
    # Resolution loop
    # -------------------------
    # Meta refresh follows + form submissions allowed per page before giving up.
    max_hops: int = Field(default=10, validation_alias=AliasChoices("WEBPAGECHECK_MAX_HOPS"))
    pages_file: Optional[str] = Field(default=None, validation_alias=AliasChoices("WEBPAGECHECK_PAGES_FILE", "PAGES_FILE"))

    # -------------------------
    # Report output
    # -------------------------
    color: str = Field(default="auto", validation_alias=AliasChoices("WEBPAGECHECK_COLOR"))
    no_color: Optional[str] = Field(default=None, validation_alias=AliasChoices("NO_COLOR"))
    width: Optional[int] = Field(default=None, validation_alias=AliasChoices("WEBPAGECHECK_WIDTH"))

    # -------------------------
    # Logging
    # -------------------------
    log_level: str = Field(default="WARNING", validation_alias=AliasChoices("LOG_LEVEL"))

    @model_validator(mode="after")
    def _validate_ranges(self) -> "CheckerConfig":
        if self.timeout_seconds <= 0:
            raise ValueError("WEBPAGECHECK_TIMEOUT_SECONDS must be positive")
        if self.max_hops < 1:
            raise ValueError("WEBPAGECHECK_MAX_HOPS must be at least 1")
        if self.max_retries < 0:
            raise ValueError("WEBPAGECHECK_MAX_RETRIES must not be negative")
        if self.width is not None and self.width < 20:
            raise ValueError("WEBPAGECHECK_WIDTH must be at least 20")
        mode = str(self.color or "").strip().lower()
        if mode not in _COLOR_MODES:
            raise ValueError(f"WEBPAGECHECK_COLOR must be one of {sorted(_COLOR_MODES)}")
        self.color = mode
        return self

    @property
    def color_disabled_by_env(self) -> bool:
        # https://no-color.org: any non-empty value disables color.
        return bool((self.no_color or "").strip())


@lru_cache(maxsize=4)
def _cached_checker_config(env_file_str: Optional[str]) -> CheckerConfig:
    env_file = Path(env_file_str) if env_file_str else None
    if env_file is not None and not env_file.is_file():
        # Only the implicit candidates are optional.
        raise ConfigurationError(f"Env file not found: {env_file}")
    candidates = [env_file] if env_file else _env_file_candidates()
    existing = [p for p in candidates if p and p.exists()]
    return CheckerConfig(_env_file=existing or None, _env_file_encoding="utf-8")  # type: ignore[arg-type]


def load_checker_config(*, env_file: Optional[Path] = None) -> CheckerConfig:
    return _cached_checker_config(str(env_file) if env_file else None)
