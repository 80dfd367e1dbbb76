from urllib.parse import urlparse, urljoin

from flask import Blueprint, render_template, request, redirect, url_for, flash, current_app
from flask_login import login_user, login_required, logout_user, current_user

from models import User

auth_bp = Blueprint('auth', __name__)


def is_safe_url(target):
    ref_url = urlparse(request.host_url)
    test_url = urlparse(urljoin(request.host_url, target))
    return test_url.scheme in ('http', 'https') and \
           ref_url.netloc == test_url.netloc


@auth_bp.route("/login", methods=["GET", "POST"])
def login():
    next_url = request.args.get('next') or request.form.get('next')

    if current_user.is_authenticated:
        return redirect(url_for("analytics.index"))

    if request.method == "POST":
        email = request.form.get("email", "").strip().lower()
        password = request.form.get("password", "")

        if not email or not password:
            flash("Email and password are required.", "error")
            return redirect(url_for("auth.login", next=next_url))

        user = User.get_by_email(email)
        if not user or not user.check_password(password):
            current_app.logger.warning("[Auth] Failed dashboard login attempt")
            flash("Invalid email or password.", "error")
            return redirect(url_for("auth.login", next=next_url))

        login_user(user)
        current_app.logger.info(f"[Auth] User {user.id} signed in")

        if next_url and is_safe_url(next_url):
            return redirect(next_url)
        return redirect(url_for("analytics.index"))

    return render_template("auth/login.html", next=next_url)


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    flash("Signed out.", "success")
    return redirect(url_for("auth.login"))
