"""
Bubble placement algorithms.

This module maps comment identifiers to stable, visually spread positions on
the host canvas and keeps coordinates inside the safe band.

Algorithm Overview:
- Hash the identifier and a salted copy of it (31x + c over UTF-16 code
  units, wrapped to 32 bits, then an avalanche mix) into two values in [0, 1)
- Scale the first onto the vertical band, the second onto the horizontal one

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-17
Last Updated: 2025-12-21
"""

from typing import Dict, Any, NamedTuple, Tuple

from .models import BubblePoint

# =========================
# Module Constants
# =========================

# Suffix appended to the identifier for the horizontal coordinate
PLACEMENT_SALT = "x"

HASH_MULTIPLIER = 31
HASH_MASK = 0xFFFFFFFF
HASH_RANGE = 2 ** 32
MIX_1 = 0x85EBCA6B
MIX_2 = 0xC2B2AE35

# Float animation ranges (seconds)
FLOAT_DELAY_SPAN = 4.0
FLOAT_DURATION_BASE = 5.0
FLOAT_DURATION_SPAN = 3.0


class SafeBand(NamedTuple):
    """Percentage range inside which bubble centres are kept."""

    min: float = 4.0
    max: float = 96.0

    @property
    def span(self) -> float:
        return self.max - self.min

    def clamp(self, value: float) -> float:
        """Clamp a percentage into the band."""
        return max(self.min, min(self.max, value))

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


DEFAULT_BAND = SafeBand()


def band_from_config(config: Dict[str, Any]) -> SafeBand:
    """Build a SafeBand from the ``safe_band`` section of the config."""
    band = config.get("safe_band") or {}
    return SafeBand(
        float(band.get("min", DEFAULT_BAND.min)),
        float(band.get("max", DEFAULT_BAND.max)),
    )


def _utf16_units(s: str):
    """Yield the UTF-16 code units of a string."""
    data = s.encode("utf-16-le")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def _mix32(h: int) -> int:
    """Spread a 32-bit value so that near-identical inputs land far apart.

    Bijective on 32-bit integers: distinct accumulators stay distinct.
    """
    h ^= h >> 16
    h = (h * MIX_1) & HASH_MASK
    h ^= h >> 13
    h = (h * MIX_2) & HASH_MASK
    h ^= h >> 16
    return h


def hash_to_unit(s: str) -> float:
    """Deterministically hash a string into [0, 1).

    Args:
        s: Any string, typically a comment id.

    Returns:
        Float in [0, 1).
    """
    h = 0
    for unit in _utf16_units(s):
        h = (HASH_MULTIPLIER * h + unit) & HASH_MASK
    return _mix32(h) / HASH_RANGE


def placement(comment_id: str, band: SafeBand = DEFAULT_BAND, salt: str = PLACEMENT_SALT) -> BubblePoint:
    """Get the default position for a comment bubble.

    The same identifier always maps to the same point.

    Args:
        comment_id: Comment identifier.
        band: Safe band both coordinates are scaled into.
        salt: Suffix used to derive the horizontal coordinate.

    Returns:
        BubblePoint with top and left percentages inside the band.
    """
    h1 = hash_to_unit(comment_id)
    h2 = hash_to_unit(comment_id + salt)
    top = band.min + h1 * band.span
    left = band.min + h2 * band.span
    return BubblePoint(top, left)


def clamp_point(top: float, left: float, band: SafeBand = DEFAULT_BAND) -> BubblePoint:
    """Clamp both coordinates of a point into the band."""
    return BubblePoint(band.clamp(top), band.clamp(left))


def float_timing(comment_id: str) -> Tuple[float, float]:
    """Get the float animation delay and duration for a bubble.

    Args:
        comment_id: Comment identifier.

    Returns:
        Tuple of (delay, duration) in seconds; delay in [0, 4), duration in [5, 8).
    """
    h = hash_to_unit(comment_id)
    delay = round(h * FLOAT_DELAY_SPAN, 2)
    duration = round(FLOAT_DURATION_BASE + h * FLOAT_DURATION_SPAN, 2)
    return delay, duration
