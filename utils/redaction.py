"""Helpers for safely logging connection strings, endpoints and keys."""

from __future__ import annotations

from urllib.parse import urlparse


def redact_database_url(url: str) -> str:
    """Return DATABASE_URL with password masked for logs/errors."""
    raw = (url or "").strip()
    if not raw:
        return "EMPTY_DATABASE_URL"
    try:
        parsed = urlparse(raw)
        scheme = parsed.scheme or "postgresql"
        host = parsed.hostname or "unknown-host"
        port = f":{parsed.port}" if parsed.port else ""
        db_name = parsed.path.lstrip("/") or "unknown-db"
        if parsed.username:
            return f"{scheme}://{parsed.username}:****@{host}{port}/{db_name}"
        return f"{scheme}://{host}{port}/{db_name}"
    except ValueError:
        return "INVALID_DATABASE_URL"


def redact_endpoint_url(url: str) -> str:
    """Drop credentials and query string from an HTTP endpoint URL."""
    raw = (url or "").strip()
    if not raw:
        return "EMPTY_URL"
    try:
        parsed = urlparse(raw)
        host = parsed.hostname or "unknown-host"
        port = f":{parsed.port}" if parsed.port else ""
        return f"{parsed.scheme or 'https'}://{host}{port}{parsed.path}"
    except ValueError:
        return "INVALID_URL"


def redact_key(key: str | None) -> str:
    """Keep only the last four characters of an API key."""
    if not key:
        return "<none>"
    if len(key) <= 4:
        return "****"
    return f"****{key[-4:]}"
