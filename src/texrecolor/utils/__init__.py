"""Utility modules for texrecolor."""

from .config import ConfigManager, ProcessingConfig
from .logging import get_logger, setup_logging

__all__ = [
    "ConfigManager",
    "ProcessingConfig",
    "get_logger",
    "setup_logging",
]
