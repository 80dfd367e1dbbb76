"""
Client-side tracking SDK for the /track-event endpoint.

    from tracker import SessionContext, Transport, EventEmitter

    emitter = EventEmitter(SessionContext(session_storage), Transport.from_env())
    emitter.record_page_visit("/shop", url="https://example.com/shop?utm_source=newsletter")

    @emitter.trackable("hero-cta", "Explore Collections")
    def on_explore():
        ...
"""
from tracker.session import SessionContext, Attribution, extract_utm_params, generate_session_id
from tracker.transport import Transport, SendResult
from tracker.emitter import EventEmitter

__all__ = [
    "SessionContext",
    "Attribution",
    "extract_utm_params",
    "generate_session_id",
    "Transport",
    "SendResult",
    "EventEmitter",
]
