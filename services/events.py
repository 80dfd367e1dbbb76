"""
Event intake service.

Turns the `{type, data}` envelope posted to /track-event into one of two
typed records (PageVisit | ClickEvent) and writes it as a single row.

Validation happens here, at the boundary, so that a malformed envelope
fails with a readable message instead of whatever the storage layer says.
Field *lengths* are still left to the database.
"""
import logging
from dataclasses import dataclass, asdict, replace
from typing import ClassVar, Optional, Union

from database import get_db

logger = logging.getLogger(__name__)

PAGE_VISIT = "page_visit"
CLICK = "click"

UTM_FIELDS = ("utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content")


class InvalidEventError(ValueError):
    """Raised when an envelope cannot be turned into a PageVisit or ClickEvent."""
    pass


def _required_str(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InvalidEventError(f"Missing required field: {key}")
    return value


def _optional_str(data: dict, key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidEventError(f"Field {key} must be a string")
    return value or None


@dataclass(frozen=True)
class PageVisit:
    event_type: ClassVar[str] = PAGE_VISIT
    table: ClassVar[str] = "page_visits"

    page_path: str
    session_id: str
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    utm_term: Optional[str] = None
    utm_content: Optional[str] = None
    referrer: Optional[str] = None
    user_agent: str = ""

    @classmethod
    def from_data(cls, data: dict) -> "PageVisit":
        return cls(
            page_path=_required_str(data, "page_path"),
            session_id=_required_str(data, "session_id"),
            referrer=_optional_str(data, "referrer"),
            **{k: _optional_str(data, k) for k in UTM_FIELDS},
        )

    def with_user_agent(self, user_agent: Optional[str]) -> "PageVisit":
        return replace(self, user_agent=user_agent or "")

    def as_row(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ClickEvent:
    event_type: ClassVar[str] = CLICK
    table: ClassVar[str] = "click_events"

    button_id: str
    page_path: str
    session_id: str
    button_text: Optional[str] = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    utm_term: Optional[str] = None
    utm_content: Optional[str] = None
    user_agent: str = ""

    @classmethod
    def from_data(cls, data: dict) -> "ClickEvent":
        return cls(
            button_id=_required_str(data, "button_id"),
            page_path=_required_str(data, "page_path"),
            session_id=_required_str(data, "session_id"),
            button_text=_optional_str(data, "button_text"),
            **{k: _optional_str(data, k) for k in UTM_FIELDS},
        )

    def with_user_agent(self, user_agent: Optional[str]) -> "ClickEvent":
        return replace(self, user_agent=user_agent or "")

    def as_row(self) -> dict:
        return asdict(self)


TrackedEvent = Union[PageVisit, ClickEvent]

EVENT_TYPES = {
    PAGE_VISIT: PageVisit,
    CLICK: ClickEvent,
}


def parse_event(event_type, data) -> TrackedEvent:
    """
    Build the typed record for an envelope.

    Any client-supplied `user_agent` in data is ignored; the route stamps
    the header value afterwards.
    """
    event_cls = EVENT_TYPES.get(event_type)
    if event_cls is None:
        raise InvalidEventError(f"Unknown event type: {event_type!r}")
    if not isinstance(data, dict):
        raise InvalidEventError("Event data must be an object")
    return event_cls.from_data(data)


def store_event(event: TrackedEvent, db=None) -> int:
    """
    Insert one row into the event's table and commit.
    Rolls back and re-raises on any storage error.
    """
    db = db or get_db()
    row = event.as_row()
    columns = ", ".join(row.keys())
    placeholders = ", ".join(["%s"] * len(row))

    try:
        cursor = db.execute(
            f"INSERT INTO {event.table} ({columns}) VALUES ({placeholders}) RETURNING id",
            tuple(row.values()),
        )
        new_id = cursor.fetchone()['id']
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("[Events] Insert into %s failed", event.table, extra={"table": event.table})
        raise

    logger.info(
        "[Events] Stored %s #%s", event.event_type, new_id,
        extra={"event_type": event.event_type, "session_id": event.session_id},
    )
    return new_id
