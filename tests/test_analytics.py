"""
Unit tests for the Analytics Service Layer.

Tests verify:
- top-N ranking and tie order
- conversion rate rounding
- dashboard_summary wiring against a mocked database
- CSV export layout and file name
"""
import csv
import io
from datetime import date, datetime, timezone

import pytest

from services.analytics import (
    top_counts,
    conversion_rate,
    count_rows,
    dashboard_summary,
    empty_summary,
    top_utm_sources,
    recent_clicks,
    fetch_all_visits,
    build_export_csv,
    export_filename,
    VISIT_CSV_HEADER,
    CLICK_CSV_HEADER,
)


def _rows(key, counts):
    """Expand {value: n} into n rows per value, in dict order."""
    return [{key: value} for value, n in counts.items() for _ in range(n)]


class TestTopCounts:
    def test_top_five_descending(self):
        rows = _rows("button_id", {"a": 3, "b": 5, "c": 1, "d": 4, "e": 2, "f": 6})

        result = top_counts(rows, "button_id", limit=5)

        assert result == [
            {"button_id": "f", "count": 6},
            {"button_id": "b", "count": 5},
            {"button_id": "d", "count": 4},
            {"button_id": "a", "count": 3},
            {"button_id": "e", "count": 2},
        ]

    def test_ties_keep_first_seen_order(self):
        rows = [{"utm_source": s} for s in ["tiktok", "google", "google", "tiktok", "email"]]
        result = top_counts(rows, "utm_source")
        assert [r["utm_source"] for r in result] == ["tiktok", "google", "email"]

    def test_none_values_are_skipped(self):
        rows = [{"utm_source": None}, {"utm_source": "google"}, {"utm_source": None}]
        assert top_counts(rows, "utm_source") == [{"utm_source": "google", "count": 1}]

    def test_fewer_than_limit(self):
        assert top_counts([{"button_id": "hero-cta"}], "button_id") == [
            {"button_id": "hero-cta", "count": 1}
        ]

    def test_empty(self):
        assert top_counts([], "button_id") == []


class TestConversionRate:
    def test_one_decimal(self):
        assert conversion_rate(3, 1) == 33.3
        assert conversion_rate(200, 50) == 25.0

    def test_no_visits(self):
        assert conversion_rate(0, 0) == 0.0
        assert conversion_rate(0, 4) == 0.0

    def test_can_exceed_hundred(self):
        assert conversion_rate(2, 5) == 250.0


class TestQueries:
    def test_count_rows(self, mock_db):
        mock_db.execute.return_value.fetchone.return_value = (12,)
        assert count_rows("click_events") == 12
        assert mock_db.execute.call_args.args[0] == "SELECT COUNT(*) FROM click_events"

    def test_count_rows_rejects_unknown_table(self, mock_db):
        with pytest.raises(ValueError):
            count_rows("users")
        mock_db.execute.assert_not_called()

    def test_utm_sources_exclude_null_in_sql(self, mock_db):
        mock_db.execute.return_value.fetchall.return_value = [{"utm_source": "google"}]
        assert top_utm_sources() == [{"utm_source": "google", "count": 1}]
        assert "utm_source IS NOT NULL" in mock_db.execute.call_args.args[0]

    def test_recent_is_newest_first_and_limited(self, mock_db):
        mock_db.execute.return_value.fetchall.return_value = [{"id": 2}, {"id": 1}]
        assert recent_clicks(10) == [{"id": 2}, {"id": 1}]
        sql, params = mock_db.execute.call_args.args
        assert "ORDER BY created_at DESC LIMIT %s" in sql
        assert params == (10,)

    def test_fetch_all_is_unbounded(self, mock_db):
        mock_db.execute.return_value.fetchall.return_value = []
        fetch_all_visits()
        assert mock_db.execute.call_args.args == (
            "SELECT * FROM page_visits ORDER BY created_at DESC",
        )


class TestDashboardSummary:
    def test_summary(self, mock_db, route_queries):
        click = {"id": 9, "button_id": "hero-cta", "page_path": "/",
                 "created_at": datetime(2026, 10, 1, tzinfo=timezone.utc)}
        visit = {"id": 4, "page_path": "/shop", "utm_source": "newsletter",
                 "created_at": datetime(2026, 10, 1, tzinfo=timezone.utc)}
        route_queries(mock_db, [
            ("COUNT(*) FROM page_visits", [(8,)]),
            ("COUNT(*) FROM click_events", [(2,)]),
            ("SELECT button_id FROM click_events", [{"button_id": "hero-cta"}, {"button_id": "hero-cta"}]),
            ("SELECT utm_source FROM page_visits", [{"utm_source": "newsletter"}]),
            ("SELECT * FROM page_visits", [visit]),
            ("SELECT * FROM click_events", [click]),
        ])

        summary = dashboard_summary(top_n=5, recent_limit=10)

        assert summary == {
            "total_visits": 8,
            "total_clicks": 2,
            "conversion_rate": 25.0,
            "top_buttons": [{"button_id": "hero-cta", "count": 2}],
            "utm_sources": [{"utm_source": "newsletter", "count": 1}],
            "recent_visits": [visit],
            "recent_clicks": [click],
        }

    def test_empty_database(self, mock_db, route_queries):
        route_queries(mock_db, [
            ("COUNT(*)", [(0,)]),
            ("SELECT", []),
        ])
        assert dashboard_summary() == empty_summary()

    def test_failure_propagates(self, mock_db):
        mock_db.execute.side_effect = Exception("connection refused")
        with pytest.raises(Exception, match="connection refused"):
            dashboard_summary()


class TestExportCsv:
    def test_empty_tables_give_two_header_rows(self):
        text = build_export_csv([], [])
        assert text == ",".join(VISIT_CSV_HEADER) + "\n" + ",".join(CLICK_CSV_HEADER)
        lines = text.splitlines()
        assert lines == [",".join(VISIT_CSV_HEADER), ",".join(CLICK_CSV_HEADER)]

    def test_rows(self):
        visits = [{
            "created_at": datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc),
            "page_path": "/shop",
            "utm_source": "newsletter",
            "utm_medium": None,
            "utm_campaign": "fall",
            "referrer": None,
            "session_id": "s1",
        }]
        clicks = [{
            "created_at": datetime(2026, 10, 19, 9, 31, tzinfo=timezone.utc),
            "button_id": "hero-cta",
            "button_text": "Explore Collections",
            "page_path": "/",
            "utm_source": "newsletter",
            "session_id": "s1",
        }]

        rows = list(csv.reader(io.StringIO(build_export_csv(visits, clicks))))

        assert rows[0] == VISIT_CSV_HEADER
        assert rows[1] == [
            "Page Visit", "2026-10-19T09:30:00+00:00", "/shop", "newsletter", "", "fall", "", "s1",
        ]
        assert rows[2] == CLICK_CSV_HEADER
        assert rows[3] == [
            "Click Event", "2026-10-19T09:31:00+00:00", "hero-cta", "Explore Collections", "/",
            "newsletter", "", "", "s1",
        ]
        assert len(rows) == 4

    def test_fields_with_commas_are_quoted(self):
        clicks = [{"button_id": "cta", "button_text": "Rings, Bands & More", "page_path": "/"}]
        text = build_export_csv([], clicks)
        assert '"Rings, Bands & More"' in text
        assert list(csv.reader(io.StringIO(text)))[2][3] == "Rings, Bands & More"

    def test_filename(self):
        assert export_filename(date(2026, 10, 19)) == "analytics-2026-10-19.csv"
