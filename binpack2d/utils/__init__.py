"""
Utility modules for configuration, logging and reporting
"""

from .config import items_from_config, load_config, save_config
from .logger import reset_logger, setup_logger
from .metrics import MetricsCalculator

__all__ = [
    "items_from_config",
    "load_config",
    "save_config",
    "reset_logger",
    "setup_logger",
    "MetricsCalculator",
]
