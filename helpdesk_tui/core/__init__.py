"""Configuration and logging for the helpdesk client."""

from .config import ConfigurationError, Settings, load_settings
from .logging import configure_logging

__all__ = [
    "ConfigurationError",
    "Settings",
    "configure_logging",
    "load_settings",
]
