import logging
import json
import sys
import uuid

from flask import request, has_request_context, g

from utils.timestamps import utc_now

# Keys callers may attach through `extra=` that are worth keeping in the JSON line.
EXTRA_FIELDS = ("event_type", "session_id", "table", "status_code", "endpoint", "rows")


class JSONFormatter(logging.Formatter):
    """
    Formatter to output logs in JSON format.
    Includes request_id if available in Flask context.
    """
    def format(self, record):
        log_record = {
            "timestamp": utc_now().isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "lineno": record.lineno,
        }

        for key in EXTRA_FIELDS:
            if key in record.__dict__:
                log_record[key] = record.__dict__[key]

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        if has_request_context():
            log_record["method"] = request.method
            log_record["path"] = request.path
            log_record["remote_ip"] = request.remote_addr
            if hasattr(g, "request_id"):
                log_record["request_id"] = g.request_id

        return json.dumps(log_record, default=str)


def setup_logger(app):
    """
    Configures the application logger to use JSON formatting
    and output to stdout (for container logging).

    Module loggers (services.*, tracker.*, database) propagate to the
    root logger, which gets the same handler.
    """
    app.logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

    app.logger.addHandler(handler)
    app.logger.setLevel(logging.INFO)
    app.logger.propagate = False

    root = logging.getLogger()
    if not any(isinstance(h.formatter, JSONFormatter) for h in root.handlers):
        root.addHandler(handler)
    if root.level == logging.NOTSET or root.level > logging.INFO:
        root.setLevel(logging.INFO)

    werkzeug_logger = logging.getLogger('werkzeug')
    werkzeug_logger.handlers = [handler]
    # Root carries the same handler.
    werkzeug_logger.propagate = False

    # Setup Gunicorn logger binding if running under Gunicorn
    gunicorn_logger = logging.getLogger('gunicorn.error')
    if gunicorn_logger.handlers:
        app.logger.handlers = gunicorn_logger.handlers
        app.logger.setLevel(gunicorn_logger.level)

    @app.before_request
    def add_request_id():
        g.request_id = request.headers.get("X-Request-Id", str(uuid.uuid4()))

    @app.after_request
    def echo_request_id(response):
        if hasattr(g, "request_id"):
            response.headers.setdefault("X-Request-Id", g.request_id)
        return response

    app.logger.info("Logger setup complete. JSON formatted logs enabled.")
