"""
Memory usage checks for the worker process.
"""

import logging

import psutil

logger = logging.getLogger(__name__)


def get_memory_usage_mb() -> float:
    """Get the resident memory of the current process in MB."""
    return psutil.Process().memory_info().rss / 1024 / 1024


def memory_exceeded(limit_mb: int, usage_mb: float | None = None) -> bool:
    """Check if resident memory has reached the limit."""
    if usage_mb is None:
        usage_mb = get_memory_usage_mb()
    exceeded = usage_mb >= limit_mb
    if exceeded:
        logger.warning(f"Memory usage {usage_mb:.1f}MB reached limit of {limit_mb}MB")
    return exceeded
