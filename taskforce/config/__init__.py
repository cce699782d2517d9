"""
Configuration package for the Taskforce engine.

Contains:
- settings: Environment-based configuration
- logging_config: Root logger setup from settings
"""

from taskforce.config.settings import Settings, get_settings, load_settings_from_env
from taskforce.config.logging_config import configure_logging

__all__ = [
    "Settings",
    "get_settings",
    "load_settings_from_env",
    "configure_logging",
]
