"""Configuration module."""
from .settings import Settings, get_settings, settings
from .logging_config import setup_logging

__all__ = ["Settings", "get_settings", "settings", "setup_logging"]
