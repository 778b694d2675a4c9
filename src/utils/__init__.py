"""
EduGen - Utility Modules
"""
from src.utils.resilience import (
    RetryConfig,
    retry_with_backoff
)

__all__ = [
    # Resilience
    "RetryConfig",
    "retry_with_backoff"
]
