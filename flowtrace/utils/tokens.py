"""Token estimation utilities.

Estimates are character based (about 4 characters per token). They drive
batching decisions only; they are not a tokenizer and not billing accurate.
"""

import math
from typing import Iterable, Optional

CHARS_PER_TOKEN = 4


def estimate_tokens(text: Optional[str]) -> int:
    """Estimate token count for text.

    Args:
        text: Text to estimate tokens for

    Returns:
        ceil(len(text) / 4), or 0 for empty text
    """
    if not text:
        return 0

    return math.ceil(len(text) / CHARS_PER_TOKEN)


def estimate_html_tokens(html_length: int) -> int:
    """Estimate tokens for an HTML snapshot of the given character length."""
    if html_length <= 0:
        return 0
    return math.ceil(html_length / CHARS_PER_TOKEN)


def sum_token_estimates(
    estimates: Iterable[Optional[int]],
    default: int = 1000,
) -> int:
    """Sum per-step estimates, substituting ``default`` where one is missing."""
    return sum(default if estimate is None else estimate for estimate in estimates)
