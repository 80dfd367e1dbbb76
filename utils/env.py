"""
Environment variable readers shared by config.py and the tracking client.

Values are stripped: whitespace pasted along with a key or URL is the usual
reason an apikey header or DATABASE_URL silently fails.
"""
import os
from typing import Optional


def get_env_str(
    name: str,
    default: Optional[str] = None,
    required: bool = False,
    strip: bool = True
) -> Optional[str]:
    """
    Read a string setting.

    Unset or blank (after stripping) returns `default`, or raises ValueError
    when `required` is set.
    """
    raw = os.getenv(name)
    value = raw.strip() if (raw is not None and strip) else raw

    if not value:
        if required:
            state = "is not set" if raw is None else "is empty (or whitespace-only)"
            raise ValueError(f"Required environment variable '{name}' {state}.")
        return default

    return value


def get_env_bool(name: str, default: bool = False) -> bool:
    """"1", "true", "yes", "on" (any case) are true; other non-blank values are false."""
    value = (get_env_str(name) or "").lower()
    if not value:
        return default
    return value in ("1", "true", "yes", "on")


def get_env_int(name: str, default: int) -> int:
    """Junk values fall back to default."""
    value = get_env_str(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def get_env_float(name: str, default: float) -> float:
    value = get_env_str(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default
