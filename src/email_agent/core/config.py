"""Application configuration models and loader utilities."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from dotenv import dotenv_values
from pydantic import BaseModel, Field, ValidationError, field_validator

from email_agent.exceptions import ConfigError

DEFAULT_MODEL = "claude-sonnet-4-20250514"


class GoogleSettings(BaseModel):
    """OAuth client registration for the Gmail API."""

    client_id: str = Field(min_length=1, description="GOOGLE_CLIENT_ID")
    client_secret: str = Field(min_length=1, description="GOOGLE_CLIENT_SECRET")
    redirect_uri: str = Field(default="http://localhost:3000/callback")


class AnthropicSettings(BaseModel):
    """Claude API access."""

    api_key: str
    model: str = Field(default=DEFAULT_MODEL)

    @field_validator("api_key")
    @classmethod
    def _check_key_format(cls, value: str) -> str:
        if not value.startswith("sk-ant-"):
            raise ValueError("Invalid Anthropic API key format")
        return value


class UserSettings(BaseModel):
    """The mailbox owner, recipient of summaries and confirmations."""

    email: str

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        if "@" not in value or value.startswith("@") or value.endswith("@"):
            raise ValueError("USER_EMAIL must be a valid email")
        return value


class AgentSettings(BaseModel):
    """Knobs for a single agent run."""

    email_lookback_hours: int = Field(default=24, gt=0)
    max_emails_per_run: int = Field(default=50, gt=0)
    enable_command_processing: bool = True
    dry_run: bool = False


class PathSettings(BaseModel):
    """Where tokens, summaries and logs live on disk."""

    token_storage: Path = Field(default=Path("./data/token.json"))
    summary_storage: Path = Field(default=Path("./data/summaries"))
    logs: Path = Field(default=Path("./logs"))


class LoggingSettings(BaseModel):
    """Logging preferences."""

    level: Literal["debug", "info", "warn", "warning", "error"] = "info"


class AppSettings(BaseModel):
    """Aggregated application configuration."""

    google: GoogleSettings
    anthropic: AnthropicSettings
    user: UserSettings
    agent: AgentSettings = Field(default_factory=AgentSettings)
    paths: PathSettings = Field(default_factory=PathSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


class OAuthSettings(BaseModel):
    """The subset of configuration needed to authorize Gmail access."""

    google: GoogleSettings
    paths: PathSettings = Field(default_factory=PathSettings)


# Environment variable -> (section, field)
ENV_KEYS: dict[str, tuple[str, str]] = {
    "GOOGLE_CLIENT_ID": ("google", "client_id"),
    "GOOGLE_CLIENT_SECRET": ("google", "client_secret"),
    "GOOGLE_REDIRECT_URI": ("google", "redirect_uri"),
    "ANTHROPIC_API_KEY": ("anthropic", "api_key"),
    "CLAUDE_MODEL": ("anthropic", "model"),
    "USER_EMAIL": ("user", "email"),
    "EMAIL_LOOKBACK_HOURS": ("agent", "email_lookback_hours"),
    "MAX_EMAILS_PER_RUN": ("agent", "max_emails_per_run"),
    "ENABLE_COMMAND_PROCESSING": ("agent", "enable_command_processing"),
    "DRY_RUN": ("agent", "dry_run"),
    "TOKEN_STORAGE_PATH": ("paths", "token_storage"),
    "SUMMARY_STORAGE_PATH": ("paths", "summary_storage"),
    "LOG_PATH": ("paths", "logs"),
    "LOG_LEVEL": ("logging", "level"),
}

# Required sections are always present so a missing variable is reported
# as a missing field rather than a missing section.
_REQUIRED_SECTIONS = ("google", "anthropic", "user")


def _normalize_value(key: str, value: str) -> Any:
    if key == "ENABLE_COMMAND_PROCESSING":
        return value.strip().lower() != "false"
    if key == "DRY_RUN":
        return value.strip().lower() == "true"
    if key == "LOG_LEVEL":
        return value.strip().lower()
    return value


def _collect_env_values(
    env_file: Path | str | None,
    include_environment: bool,
) -> dict[str, dict[str, Any]]:
    """Merge the optional env file with the process environment (env wins)."""
    file_values: dict[str, str] = {}
    if env_file:
        env_path = Path(env_file)
        if env_path.is_file():
            file_values = {
                key: value
                for key, value in dotenv_values(env_path).items()
                if key in ENV_KEYS and value is not None
            }

    env_values: dict[str, str] = {}
    if include_environment:
        env_values = {
            key: value for key, value in os.environ.items() if key in ENV_KEYS
        }

    tree: dict[str, dict[str, Any]] = {section: {} for section in _REQUIRED_SECTIONS}
    for key, value in {**file_values, **env_values}.items():
        if value == "":
            continue
        section, field = ENV_KEYS[key]
        tree.setdefault(section, {})[field] = _normalize_value(key, value)
    return tree


def _format_errors(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        problems.append(f"{location}: {item['msg']}")
    return "; ".join(problems)


def load_settings(
    env_file: Path | str | None = None,
    include_environment: bool = True,
    **overrides: Any,
) -> AppSettings:
    """Load and validate application settings.

    Raises:
        ConfigError: if any required value is missing or malformed.
    """
    collected = _collect_env_values(env_file, include_environment)
    for section, values in overrides.items():
        collected.setdefault(section, {}).update(values)
    try:
        return AppSettings.model_validate(collected)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {_format_errors(e)}") from e


def load_oauth_settings(
    env_file: Path | str | None = None,
    include_environment: bool = True,
) -> OAuthSettings:
    """Load only the Google client registration and paths."""
    collected = _collect_env_values(env_file, include_environment)
    try:
        return OAuthSettings.model_validate(
            {"google": collected["google"], "paths": collected.get("paths", {})}
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {_format_errors(e)}") from e


__all__ = [
    "AgentSettings",
    "AnthropicSettings",
    "AppSettings",
    "GoogleSettings",
    "LoggingSettings",
    "OAuthSettings",
    "PathSettings",
    "UserSettings",
    "load_oauth_settings",
    "load_settings",
]
