"""Utility modules for flowtrace.

Provides:
- Structured logging configuration
- Character-based token estimation
"""

from .logging import configure_from_settings, configure_logging, LogContext, log_operation
from .tokens import estimate_tokens, estimate_html_tokens, sum_token_estimates

__all__ = [
    # Logging
    "configure_logging",
    "configure_from_settings",
    "LogContext",
    "log_operation",
    # Tokens
    "estimate_tokens",
    "estimate_html_tokens",
    "sum_token_estimates",
]
