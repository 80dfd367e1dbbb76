from flask import Blueprint, request, jsonify, current_app

from services.events import parse_event, store_event

events_bp = Blueprint('events', __name__)


@events_bp.route('/track-event', methods=['POST'])
def track_event():
    """
    Public intake for page visits and clicks.

    Body: {"type": "page_visit" | "click", "data": {...}}
    No auth: this is a public beacon. CORS preflight is answered by
    Flask-CORS (configured in app.py).
    """
    body = request.get_json(silent=True)
    user_agent = request.headers.get('User-Agent', '')

    try:
        if not isinstance(body, dict):
            raise ValueError("Invalid JSON body")

        event = parse_event(body.get('type'), body.get('data')).with_user_agent(user_agent)
        current_app.logger.info(
            f"[Events] Tracking {event.event_type} on {event.page_path}",
            extra={"event_type": event.event_type, "session_id": event.session_id},
        )
        store_event(event)
    except Exception as e:
        current_app.logger.error(f"[Events] track-event failed: {e}")
        message = str(e) or 'Unknown error occurred'
        return jsonify({"error": message}), 500

    return jsonify({"success": True})
