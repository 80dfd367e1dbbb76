"""
Session-scoped state for the tracking client.

A SessionContext wraps whatever mapping lives exactly as long as one
visitor session (a browser tab's session storage, a Flask `session`, a
plain dict in a script). It holds two entries under fixed keys:

- analytics_session_id: opaque id correlating every event of the session
- utm_params: JSON snapshot of the last UTM-bearing page load

Attribution is sticky: a page load without UTM parameters never clears
the stored snapshot; a page load with any UTM parameter replaces it.
"""
import json
import secrets
import string
import time
from dataclasses import dataclass, asdict
from typing import MutableMapping, Optional
from urllib.parse import urlsplit, parse_qs

SESSION_ID_KEY = "analytics_session_id"
UTM_PARAMS_KEY = "utm_params"

UTM_FIELDS = ("utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content")

_BASE36 = string.digits + string.ascii_lowercase


@dataclass(frozen=True)
class Attribution:
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    utm_term: Optional[str] = None
    utm_content: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.as_dict()

    def as_dict(self) -> dict:
        """Only the fields that are present."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data) -> "Attribution":
        if not isinstance(data, dict):
            return cls()
        return cls(**{k: data[k] for k in UTM_FIELDS if isinstance(data.get(k), str) and data[k]})


def extract_utm_params(url: Optional[str]) -> Attribution:
    """
    Read the five UTM parameters from a URL (or a bare "?query" / "/path?query").
    Empty values count as absent; repeated keys keep the first value.
    """
    query = urlsplit(url or "").query
    params = parse_qs(query)
    return Attribution(**{k: params[k][0] for k in UTM_FIELDS if params.get(k)})


def generate_session_id(now_ms: Optional[int] = None) -> str:
    """'<epoch millis>-<9 base36 chars>'."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"{now_ms}-{suffix}"


class SessionContext:
    def __init__(self, storage: Optional[MutableMapping] = None):
        self._storage = storage if storage is not None else {}

    @property
    def storage(self) -> MutableMapping:
        return self._storage

    def get_or_create_session_id(self) -> str:
        session_id = self._storage.get(SESSION_ID_KEY)
        if not session_id:
            session_id = generate_session_id()
            self._storage[SESSION_ID_KEY] = session_id
        return session_id

    def capture_attribution_if_present(self, url: Optional[str]) -> Optional[Attribution]:
        """
        Store the URL's UTM parameters if it carries any.
        Returns the captured snapshot, or None when the URL had none.
        """
        attribution = extract_utm_params(url)
        if attribution.is_empty:
            return None
        self._storage[UTM_PARAMS_KEY] = json.dumps(attribution.as_dict())
        return attribution

    def get_stored_attribution(self) -> Attribution:
        stored = self._storage.get(UTM_PARAMS_KEY)
        if not stored:
            return Attribution()
        try:
            return Attribution.from_dict(json.loads(stored))
        except (TypeError, ValueError):
            # Corrupt snapshot reads as "never captured".
            return Attribution()
