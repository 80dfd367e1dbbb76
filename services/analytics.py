"""
Analytics Service Layer

Single source of truth for the dashboard numbers.
Reads from:
- page_visits (page views, UTM attribution)
- click_events (tracked CTAs)

Key Functions:
- dashboard_summary(top_n, recent_limit)
- top_counts(rows, key, limit)
- build_export_csv(visits, clicks)

Queries are independent reads; there is no snapshot consistency between
them, so totals and top-N lists may disagree slightly under live traffic.
"""
import csv
import io
from datetime import date
from typing import Iterable, Optional

from database import get_db
from utils.timestamps import to_iso, utc_today

EVENT_TABLES = ("page_visits", "click_events")

VISIT_CSV_HEADER = [
    'Type', 'Timestamp', 'Page Path', 'UTM Source', 'UTM Medium', 'UTM Campaign',
    'Referrer', 'Session ID',
]
CLICK_CSV_HEADER = [
    'Type', 'Timestamp', 'Button ID', 'Button Text', 'Page Path', 'UTM Source',
    'UTM Medium', 'UTM Campaign', 'Session ID',
]


def _check_table(table: str) -> str:
    if table not in EVENT_TABLES:
        raise ValueError(f"Unknown analytics table: {table}")
    return table


def count_rows(table: str) -> int:
    db = get_db()
    row = db.execute(f"SELECT COUNT(*) FROM {_check_table(table)}").fetchone()
    return row[0] if row else 0


def top_counts(rows: Iterable, key: str, limit: int = 5) -> list:
    """
    Group rows by `key`, count, sort descending and keep the first `limit`.

    Ties keep the order in which the key was first seen in `rows`
    (sorted() is stable and dict preserves insertion order).
    Rows whose key is None are skipped.
    """
    counts = {}
    for row in rows:
        value = row[key]
        if value is None:
            continue
        counts[value] = counts.get(value, 0) + 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [{key: value, "count": count} for value, count in ranked[:limit]]


def top_buttons(limit: int = 5) -> list:
    db = get_db()
    rows = db.execute("SELECT button_id FROM click_events").fetchall()
    return top_counts(rows, 'button_id', limit)


def top_utm_sources(limit: int = 5) -> list:
    db = get_db()
    rows = db.execute(
        "SELECT utm_source FROM page_visits WHERE utm_source IS NOT NULL"
    ).fetchall()
    return top_counts(rows, 'utm_source', limit)


def _recent(table: str, limit: Optional[int]) -> list:
    db = get_db()
    sql = f"SELECT * FROM {_check_table(table)} ORDER BY created_at DESC"
    if limit is None:
        rows = db.execute(sql).fetchall()
    else:
        rows = db.execute(sql + " LIMIT %s", (limit,)).fetchall()
    return [dict(r) for r in rows]


def recent_visits(limit: int = 10) -> list:
    return _recent('page_visits', limit)


def recent_clicks(limit: int = 10) -> list:
    return _recent('click_events', limit)


def fetch_all_visits() -> list:
    """Every visit, newest first. Unbounded (no pagination)."""
    return _recent('page_visits', None)


def fetch_all_clicks() -> list:
    return _recent('click_events', None)


def conversion_rate(total_visits: int, total_clicks: int) -> float:
    if total_visits <= 0:
        return 0.0
    return round((total_clicks / total_visits) * 100, 1)


def empty_summary() -> dict:
    return {
        "total_visits": 0,
        "total_clicks": 0,
        "conversion_rate": 0.0,
        "top_buttons": [],
        "utm_sources": [],
        "recent_visits": [],
        "recent_clicks": [],
    }


def dashboard_summary(top_n: int = 5, recent_limit: int = 10) -> dict:
    """
    Everything the dashboard shows, in one dict.
    Raises on the first failed query; the route decides the fallback.
    """
    total_visits = count_rows('page_visits')
    total_clicks = count_rows('click_events')

    return {
        "total_visits": total_visits,
        "total_clicks": total_clicks,
        "conversion_rate": conversion_rate(total_visits, total_clicks),
        "top_buttons": top_buttons(top_n),
        "utm_sources": top_utm_sources(top_n),
        "recent_visits": recent_visits(recent_limit),
        "recent_clicks": recent_clicks(recent_limit),
    }


def build_export_csv(visits: list, clicks: list) -> str:
    """
    Two CSV blocks, visits then clicks, each with its own header row.
    """
    output = io.StringIO()
    writer = csv.writer(output, lineterminator='\n')

    writer.writerow(VISIT_CSV_HEADER)
    for v in visits:
        writer.writerow([
            'Page Visit',
            to_iso(v.get('created_at')),
            v.get('page_path') or '',
            v.get('utm_source') or '',
            v.get('utm_medium') or '',
            v.get('utm_campaign') or '',
            v.get('referrer') or '',
            v.get('session_id') or '',
        ])

    writer.writerow(CLICK_CSV_HEADER)
    for c in clicks:
        writer.writerow([
            'Click Event',
            to_iso(c.get('created_at')),
            c.get('button_id') or '',
            c.get('button_text') or '',
            c.get('page_path') or '',
            c.get('utm_source') or '',
            c.get('utm_medium') or '',
            c.get('utm_campaign') or '',
            c.get('session_id') or '',
        ])

    # Blocks are joined by a newline; no trailing newline after the last row.
    return output.getvalue().rstrip("\n")


def export_filename(today: Optional[date] = None) -> str:
    today = today or utc_today()
    return f"analytics-{today.isoformat()}.csv"
