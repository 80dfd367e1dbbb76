"""
Best-effort delivery of one tracking event to the /track-event endpoint.

Workflow:
  POST {TRACK_EVENT_URL}  body {"type": ..., "data": {...}}

Auth headers mirror the hosted function-invocation client:
  apikey: <TRACK_EVENT_API_KEY>
  Authorization: Bearer <TRACK_EVENT_API_KEY>
  x-client-info: lumiere-tracker/1.0

send() never raises and never retries; failures come back as a
SendResult the caller is free to ignore.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from utils.env import get_env_str, get_env_float
from utils.redaction import redact_endpoint_url

logger = logging.getLogger(__name__)

CLIENT_INFO = "lumiere-tracker/1.0"
DEFAULT_TIMEOUT = 2.0


@dataclass(frozen=True)
class SendResult:
    ok: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


class Transport:
    def __init__(
        self,
        endpoint_url: str,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        http: Optional[requests.Session] = None,
    ):
        self.endpoint_url = endpoint_url
        self.api_key = api_key
        self.timeout = timeout
        self._owns_http = http is None
        self._http = http or requests.Session()

    @classmethod
    def from_env(cls) -> "Transport":
        base_url = (get_env_str("BASE_URL", default="http://localhost:5000") or "").rstrip("/")
        return cls(
            endpoint_url=get_env_str("TRACK_EVENT_URL", default=f"{base_url}/track-event"),
            api_key=get_env_str("TRACK_EVENT_API_KEY"),
            timeout=get_env_float("TRACK_EVENT_TIMEOUT", default=DEFAULT_TIMEOUT),
        )

    def close(self) -> None:
        """Release the pooled connection. Injected sessions belong to the caller."""
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _headers(self) -> Dict[str, str]:
        headers = {"x-client-info": CLIENT_INFO}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def send(self, event_type: str, payload: Dict[str, Any]) -> SendResult:
        body = {"type": event_type, "data": payload}
        try:
            resp = self._http.post(
                self.endpoint_url,
                json=body,
                headers=self._headers(),
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            status = e.response.status_code if e.response is not None else None
            logger.warning(
                "[Tracker] Error tracking %s via %s: %s",
                event_type, redact_endpoint_url(self.endpoint_url), e,
                extra={"event_type": event_type, "status_code": status},
            )
            return SendResult(ok=False, status_code=status, error=str(e))
        except (TypeError, ValueError) as e:
            # Payload not JSON-serializable.
            logger.warning("[Tracker] Could not encode %s event: %s", event_type, e,
                           extra={"event_type": event_type})
            return SendResult(ok=False, error=str(e))

        return SendResult(ok=True, status_code=resp.status_code)
