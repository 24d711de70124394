"""Utility functions for Deploybot."""

from deploybot.utils.logging import bind_delivery, configure_logging, get_logger

__all__ = [
    "bind_delivery",
    "configure_logging",
    "get_logger",
]
