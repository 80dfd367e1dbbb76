#!/usr/bin/env python3
"""Simulate one visitor session against a running /track-event endpoint.

Sends a campaign landing, a second page view without UTM parameters (the
campaign must stick), and two CTA clicks.

Usage:
  TRACK_EVENT_URL=http://localhost:5000/track-event python scripts/simulate_visitor.py
  python scripts/simulate_visitor.py --source instagram --campaign fall-rings
"""

from __future__ import annotations

import argparse
import os
import sys

# Add project root to path
sys.path.append(os.getcwd())

from tracker import EventEmitter, SessionContext, Transport
from utils.redaction import redact_endpoint_url, redact_key


def simulate_flow(source: str, campaign: str) -> int:
    with Transport.from_env() as transport:
        print(f"Endpoint: {redact_endpoint_url(transport.endpoint_url)} (key {redact_key(transport.api_key)})")
        return _run_session(SessionContext(), transport, source, campaign)


def _run_session(session: SessionContext, transport: Transport, source: str, campaign: str) -> int:
    emitter = EventEmitter(session, transport)

    print(f"Session ID: {session.get_or_create_session_id()}")

    print("\n--- Landing from campaign ---")
    result = emitter.record_page_visit(
        "/",
        url=f"/?utm_source={source}&utm_medium=social&utm_campaign={campaign}",
        referrer="https://www.instagram.com/",
    )
    print(f"page_visit /: ok={result.ok} status={result.status_code}")

    @emitter.trackable("hero-cta", "Explore Collections")
    def explore():
        print("Handler ran: navigating to /shop")

    explore()

    print("\n--- Browsing without UTM parameters ---")
    result = emitter.record_page_visit("/shop", referrer="/")
    print(f"page_visit /shop: ok={result.ok} status={result.status_code}")
    print(f"Stored attribution: {session.get_stored_attribution().as_dict()}")

    result = emitter.record_click("add-to-bag", label=None)
    print(f"click add-to-bag: ok={result.ok} status={result.status_code}")

    return 0 if result.ok else 1


def main() -> int:
    parser = argparse.ArgumentParser(description="Send a simulated visitor session.")
    parser.add_argument("--source", default="newsletter")
    parser.add_argument("--campaign", default="autumn-launch")
    args = parser.parse_args()
    return simulate_flow(args.source, args.campaign)


if __name__ == "__main__":
    sys.exit(main())
