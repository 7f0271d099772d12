"""Utility helpers for logging."""

from .logging_utils import create_logger, set_verbosity

__all__ = ["create_logger", "set_verbosity"]
