"""
Tests for the environment variable helpers used by config and the tracker.
"""
import pytest

from utils.env import get_env_str, get_env_bool, get_env_int, get_env_float


class TestGetEnvStr:

    def test_strips_pasted_api_key(self, monkeypatch):
        """Trailing whitespace from a copy-pasted key must not reach the apikey header."""
        monkeypatch.setenv("TRACK_EVENT_API_KEY", "anon-key-123 \n")
        assert get_env_str("TRACK_EVENT_API_KEY") == "anon-key-123"

    def test_whitespace_only_falls_back_to_default(self, monkeypatch):
        monkeypatch.setenv("TRACK_EVENT_URL", "   ")
        assert get_env_str("TRACK_EVENT_URL", default="http://localhost:5000/track-event") == \
            "http://localhost:5000/track-event"

    def test_required_missing(self, monkeypatch):
        monkeypatch.delenv("REQUIRED_MISSING_VAR", raising=False)
        with pytest.raises(ValueError, match="REQUIRED_MISSING_VAR"):
            get_env_str("REQUIRED_MISSING_VAR", required=True)

    def test_strip_false_preserves_value(self, monkeypatch):
        monkeypatch.setenv("RAW_VAR", "  value  ")
        assert get_env_str("RAW_VAR", strip=False) == "  value  "


class TestTypedHelpers:

    @pytest.mark.parametrize("raw, expected", [
        ("1", True), ("TRUE", True), ("on", True), ("no", False), ("0", False),
    ])
    def test_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("TRUST_PROXY_HEADERS", raw)
        assert get_env_bool("TRUST_PROXY_HEADERS") is expected

    def test_bool_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("TRUST_PROXY_HEADERS", raising=False)
        assert get_env_bool("TRUST_PROXY_HEADERS", default=True) is True

    def test_int(self, monkeypatch):
        monkeypatch.setenv("DASHBOARD_TOP_N", " 7 ")
        assert get_env_int("DASHBOARD_TOP_N", default=5) == 7
        monkeypatch.setenv("DASHBOARD_TOP_N", "seven")
        assert get_env_int("DASHBOARD_TOP_N", default=5) == 5

    def test_float(self, monkeypatch):
        monkeypatch.setenv("TRACK_EVENT_TIMEOUT", "0.25")
        assert get_env_float("TRACK_EVENT_TIMEOUT", default=2.0) == 0.25
        monkeypatch.delenv("TRACK_EVENT_TIMEOUT")
        assert get_env_float("TRACK_EVENT_TIMEOUT", default=2.0) == 2.0


class TestRedaction:

    def test_database_url_password_is_masked(self):
        from utils.redaction import redact_database_url
        assert redact_database_url("postgresql://app:hunter2@db:5432/lumiere") == \
            "postgresql://app:****@db:5432/lumiere"

    def test_endpoint_url_drops_query_and_credentials(self):
        from utils.redaction import redact_endpoint_url
        assert redact_endpoint_url("https://u:p@fn.example/track-event?apikey=abc") == \
            "https://fn.example/track-event"

    def test_key_keeps_last_four(self):
        from utils.redaction import redact_key
        assert redact_key("anon-key-123456") == "****3456"
        assert redact_key(None) == "<none>"
