"""Configuration, logging and date helpers."""

from email_agent.core.config import AppSettings, OAuthSettings, load_oauth_settings, load_settings
from email_agent.core.logging import configure_logging

__all__ = [
    "AppSettings",
    "OAuthSettings",
    "configure_logging",
    "load_oauth_settings",
    "load_settings",
]
