import functools
from typing import Optional
from urllib.parse import urlsplit

from tracker.session import SessionContext
from tracker.transport import Transport, SendResult

PAGE_VISIT = "page_visit"
CLICK = "click"


class EventEmitter:
    """
    Builds page-visit and click payloads from the session context and
    hands each one to the transport. One transport call per record.

    `current_path` plays the role of the browser's location: it is updated
    by record_page_visit and used as the default page for clicks.
    """

    def __init__(self, session: SessionContext, transport: Transport):
        self.session = session
        self.transport = transport
        self.current_path = "/"

    def record_page_visit(self, path: str, url: Optional[str] = None,
                          referrer: Optional[str] = None) -> SendResult:
        """
        Capture attribution from `url` (or `path`, which may carry a query
        string), then send the visit.
        """
        self.session.capture_attribution_if_present(url if url is not None else path)
        page_path = urlsplit(path).path or "/"
        self.current_path = page_path

        payload = {
            "page_path": page_path,
            **self.session.get_stored_attribution().as_dict(),
            "referrer": referrer,
            "session_id": self.session.get_or_create_session_id(),
        }
        return self.transport.send(PAGE_VISIT, payload)

    def record_click(self, control_id: str, label=None,
                     page_path: Optional[str] = None) -> SendResult:
        # Non-text labels (icons, markup) are reported by their id.
        button_text = label if isinstance(label, str) else control_id

        payload = {
            "button_id": control_id,
            "button_text": button_text,
            "page_path": page_path or self.current_path,
            **self.session.get_stored_attribution().as_dict(),
            "session_id": self.session.get_or_create_session_id(),
        }
        return self.transport.send(CLICK, payload)

    def trackable(self, control_id: str, label=None, page_path: Optional[str] = None):
        """
        Decorator for click handlers: record the click, then run the handler.

        The handler runs whatever the tracking outcome; tracking latency is
        bounded by the transport timeout.
        """
        def decorator(handler):
            @functools.wraps(handler)
            def wrapper(*args, **kwargs):
                self.record_click(control_id, label, page_path)
                return handler(*args, **kwargs)
            return wrapper
        return decorator
