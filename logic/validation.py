"""
Validation and sanitization utilities.

This module contains functions for sanitizing guest input: comment text and
bubble coordinates.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-17
"""

import math
from typing import Any

from fastapi import HTTPException

MAX_COMMENT_LEN = 500


def sanitise_comment_text(value: Any, max_len: int = MAX_COMMENT_LEN) -> str:
    """Sanitize and validate a guest comment.

    Args:
        value: Raw comment text.
        max_len: Maximum length after trimming.

    Returns:
        Trimmed comment text.

    Raises:
        HTTPException: If the comment is empty or too long.
    """
    if not isinstance(value, str):
        raise HTTPException(400, "Comment must be text")
    value = value.strip()
    if not value:
        raise HTTPException(400, "Comment is empty")
    if len(value) > max_len:
        raise HTTPException(400, "Comment too long")
    return value


def sanitise_percent(value: Any) -> float:
    """Sanitize and validate a percentage coordinate.

    Out-of-range values are accepted here; callers clamp them into the safe band.

    Args:
        value: Value to convert to float.

    Returns:
        Finite float value.

    Raises:
        HTTPException: If value is not a finite number.
    """
    if isinstance(value, bool):
        raise HTTPException(400, "Invalid coordinate")
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise HTTPException(400, "Invalid coordinate")
    if not math.isfinite(result):
        raise HTTPException(400, "Invalid coordinate")
    return result
