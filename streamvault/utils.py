import math
from typing import Any, Optional


def coerce_seconds(value: Any) -> Optional[float]:
    """
    Converts an untrusted number-like value to a finite float.
    Returns None for booleans, NaN/inf, or anything non-numeric.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def coerce_int(value: Any) -> Optional[int]:
    """Like coerce_seconds, for whole numbers such as season/episode."""
    number = coerce_seconds(value)
    if number is None or number != int(number):
        return None
    return int(number)


def format_seconds_to_human_readable(seconds: float) -> str:
    """
    Converts a float of seconds into a human-readable string (e.g., "1h 25m 30s").
    Handles hours, minutes, and seconds, omitting units if their value is zero.
    """
    if seconds is None:
        return "N/A"

    seconds = math.ceil(seconds)  # Round up to the nearest whole second

    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    remaining_seconds = seconds % 60

    parts = []
    if hours > 0:
        parts.append(f"{int(hours)}h")
    if minutes > 0:
        parts.append(f"{int(minutes)}m")
    if remaining_seconds > 0 or (hours == 0 and minutes == 0):  # Always show seconds under a minute
        parts.append(f"{int(remaining_seconds)}s")

    return " ".join(parts)


def format_time_left(watched: float, total: float) -> str:
    """Label for a continue-watching card, e.g. "42m left"."""
    if not total or total <= 0:
        return ""
    remaining = max(0.0, total - watched)
    if remaining < 60:
        return "Almost done"
    return f"{format_seconds_to_human_readable(remaining - remaining % 60)} left"
