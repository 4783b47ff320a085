"""Structured JSON logging, one file per component."""

from .framework import SmartLogger, log_execution, log_operation
from .multi_file_logger import MultiFileLogger, get_multi_file_logger

__all__ = [
    "SmartLogger",
    "log_execution",
    "log_operation",
    "MultiFileLogger",
    "get_multi_file_logger",
]
