import click
from flask import Flask, redirect, url_for
from flask_cors import CORS
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect

import config
import database
from database import close_connection, init_schema
from models import User
from utils.logger import setup_logger
from utils.timestamps import format_display

from routes.auth import auth_bp
from routes.events import events_bp
from routes.analytics import analytics_bp


COOKIE_SETTINGS = (
    'SESSION_COOKIE_HTTPONLY',
    'SESSION_COOKIE_SAMESITE',
    'SESSION_COOKIE_SECURE',
    'REMEMBER_COOKIE_HTTPONLY',
    'REMEMBER_COOKIE_SECURE',
    'PREFERRED_URL_SCHEME',
)


def _register_health_checks(app):
    @app.route("/healthz")
    def healthz():
        """Liveness plus a DB round trip."""
        try:
            database.get_db().execute("SELECT 1").fetchone()
        except Exception as e:
            app.logger.error(f"[Health] DB check failed: {e}")
            return {"status": "error", "db": str(e)}, 503
        return {"status": "ok", "db": "connected"}, 200

    @app.route("/ping")
    def ping():
        return {"status": "ok"}, 200


def _register_cli(app):
    @app.cli.command("init-db")
    def init_db_cmd():
        """Create the analytics tables if they do not exist."""
        init_schema(database.get_db())
        click.echo("Schema applied.")

    @app.cli.command("create-user")
    @click.argument("email")
    @click.password_option()
    def create_user_cmd(email, password):
        """Provision a dashboard user."""
        if User.get_by_email(email):
            raise click.ClickException(f"User {email} already exists.")
        user = User.create(email, password)
        click.echo(f"Created user {user.id} ({user.email}).")


def create_app(test_config=None):
    app = Flask(__name__)

    if test_config:
        app.config.update(test_config)

    app.config['SECRET_KEY'] = config.SECRET_KEY
    for name in COOKIE_SETTINGS:
        app.config[name] = getattr(config, name)

    setup_logger(app)

    # Behind a load balancer only; never trust forwarded headers by default.
    if config.IS_PRODUCTION and config.TRUST_PROXY_HEADERS:
        from werkzeug.middleware.proxy_fix import ProxyFix
        n = config.PROXY_FIX_NUM_PROXIES
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=n, x_proto=n, x_host=n, x_port=n)
        app.logger.info(f"[Security] ProxyFix enabled for {n} proxies")

    # CSRF for the dashboard forms
    csrf = CSRFProtect(app)
    app.config["WTF_CSRF_TIME_LIMIT"] = 3600

    # Public beacon: any origin, fixed header allowlist, OPTIONS answered empty.
    CORS(app, resources={
        r"/track-event": {
            "origins": "*",
            "send_wildcard": True,
            "methods": ["POST", "OPTIONS"],
            "allow_headers": config.TRACK_EVENT_ALLOWED_HEADERS,
        }
    })

    app.teardown_appcontext(close_connection)

    login_manager = LoginManager()
    login_manager.login_view = 'auth.login'
    login_manager.login_message = "Please sign in to view analytics."
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        return User.get(user_id)

    app.jinja_env.filters['display_time'] = format_display

    _register_health_checks(app)

    @app.route("/")
    def root():
        return redirect(url_for("analytics.index"))

    app.register_blueprint(auth_bp)
    app.register_blueprint(events_bp)
    app.register_blueprint(analytics_bp)

    # Cross-origin beacon posts carry no CSRF token.
    csrf.exempt(events_bp)

    _register_cli(app)

    return app


# WSGI entry point (gunicorn app:app)
app = create_app()

if __name__ == "__main__":
    app.run(host='0.0.0.0', debug=True)
