"""
Static fallback visuals.

Gradients shown while no generated image is available or after
regeneration has failed. They never touch the cache.
"""

from typing import Tuple

Gradient = Tuple[str, ...]

NIGHT_GRADIENTS = (
    ("clear", ("#0F2027", "#203A43", "#2C5364")),
    ("rain", ("#1A1A2E", "#16213E", "#0F3460")),
    ("snow", ("#232526", "#414345", "#616161")),
    ("fog", ("#2C3E50", "#34495E", "#5D6D7E")),
    ("cloud", ("#232526", "#414345")),
)
DEFAULT_NIGHT: Gradient = ("#141E30", "#243B55")

DAY_GRADIENTS = (
    ("clear", ("#56CCF2", "#2F80ED", "#1E5F9E")),
    ("rain", ("#536976", "#414B5A", "#292E49")),
    ("snow", ("#83a4d4", "#b6fbff", "#a8d5ff")),
    ("fog", ("#606c88", "#3f4c6b", "#2d3748")),
    ("cloud", ("#757F9A", "#8E9EAB", "#6B7A8F")),
)
DEFAULT_DAY: Gradient = ("#56CCF2", "#2F80ED", "#1E5F9E")


def fallback_gradient(condition: str, is_day: bool) -> Gradient:
    """
    Pick the top-to-bottom gradient for a weather condition.

    Matching is by substring, so 'Cloudy' and 'Partly cloudy' both use the
    cloud palette. Drizzle and thunderstorms fall through to the default.
    """
    condition_lower = (condition or "").lower()
    table, default = (DAY_GRADIENTS, DEFAULT_DAY) if is_day else (NIGHT_GRADIENTS, DEFAULT_NIGHT)
    for needle, colors in table:
        if needle in condition_lower:
            return colors
    return default
