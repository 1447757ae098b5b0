"""Core utilities and configuration."""

from wp_autopost.core.config import Settings, get_settings
from wp_autopost.core.logging import get_logger, setup_logging, wordpress_logger

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Logging
    "get_logger",
    "setup_logging",
    "wordpress_logger",
]
