"""
Analytics Dashboard Routes.

Provides:
- GET /analytics/ - Dashboard view (totals, top buttons, UTM sources, recent activity)
- GET /analytics/summary.json - Same numbers as JSON
- GET /analytics/export.csv - Full export of both event tables

All routes require login; anonymous users are sent to /login.
"""
from flask import Blueprint, render_template, redirect, url_for, flash, jsonify, Response, current_app
from flask_login import login_required

from config import DASHBOARD_TOP_N, DASHBOARD_RECENT_LIMIT
from services.analytics import (
    dashboard_summary,
    empty_summary,
    fetch_all_visits,
    fetch_all_clicks,
    build_export_csv,
    export_filename,
)

analytics_bp = Blueprint('analytics', __name__, url_prefix='/analytics')


def _load_summary():
    """Returns (summary, error). On failure the summary is zeroed."""
    try:
        return dashboard_summary(DASHBOARD_TOP_N, DASHBOARD_RECENT_LIMIT), None
    except Exception as e:
        current_app.logger.error(f"[Analytics] Error fetching analytics: {e}")
        return empty_summary(), "Failed to load analytics data"


@analytics_bp.route("/")
@login_required
def index():
    summary, error = _load_summary()
    if error:
        flash(error, "error")
    return render_template("analytics/dashboard.html", data=summary)


@analytics_bp.route("/summary.json")
@login_required
def summary_json():
    summary, error = _load_summary()
    if error:
        summary["error"] = error
    return jsonify(summary)


@analytics_bp.route("/export.csv")
@login_required
def export_csv():
    try:
        visits = fetch_all_visits()
        clicks = fetch_all_clicks()
    except Exception as e:
        current_app.logger.error(f"[Analytics] Error exporting CSV: {e}")
        flash("Failed to export analytics data", "error")
        return redirect(url_for("analytics.index"))

    filename = export_filename()
    current_app.logger.info(
        f"[Analytics] CSV export ({len(visits)} visits, {len(clicks)} clicks)",
        extra={"rows": len(visits) + len(clicks)},
    )

    return Response(
        build_export_csv(visits, clicks),
        mimetype='text/csv',
        headers={
            'Content-Disposition': f'attachment; filename="{filename}"'
        }
    )
