"""Configuration module"""
from .settings import EngineSettings, get_settings, settings
from .logging_config import LOG_FORMAT, configure_logging

__all__ = [
    # Settings
    "EngineSettings",
    "get_settings",
    "settings",
    # Logging
    "LOG_FORMAT",
    "configure_logging",
]
