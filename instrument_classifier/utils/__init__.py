"""Utility modules for the instrument classifier."""

from .config import Config, get_config
from .logger import setup_logger, get_logger
from .formatters import JSONFormatter, StructuredLogAdapter

__all__ = [
    'Config',
    'get_config',
    'setup_logger',
    'get_logger',
    'JSONFormatter',
    'StructuredLogAdapter',
]
