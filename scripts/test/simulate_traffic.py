# scripts/test/simulate_traffic.py
"""Drive the running backend the way the staff and customer screens do."""

import argparse
import json
import requests

BACKEND_URL = "http://localhost:8080/api/v1"


def _show(action, resp):
    try:
        body = resp.json()
    except ValueError:
        body = resp.text
    mark = "✅" if resp.ok else "❌"
    print(f"{mark} {action} → HTTP {resp.status_code}: {json.dumps(body, indent=2, default=str)}")


def _headers(api_key):
    return {"X-API-Key": api_key} if api_key else {}


def simulate_entry(plate, api_key=None):
    resp = requests.post(f"{BACKEND_URL}/entries", json={"plate_number": plate},
                         headers=_headers(api_key), timeout=10)
    _show(f"entry plate={plate}", resp)


def simulate_check(plate, api_key=None):
    resp = requests.get(f"{BACKEND_URL}/entries/check/{plate}", headers=_headers(api_key), timeout=10)
    _show(f"check plate={plate}", resp)


def simulate_lookup(plate):
    resp = requests.get(f"{BACKEND_URL}/lookup/{plate}", timeout=10)
    _show(f"lookup plate={plate}", resp)


def simulate_exit(plate):
    resp = requests.post(f"{BACKEND_URL}/exit/{plate}", timeout=10)
    _show(f"exit plate={plate}", resp)


def simulate_visit(plate, api_key=None):
    """Entry, lookup, exit in one go. Note the 5-minute re-entry guard afterwards."""
    simulate_entry(plate, api_key)
    simulate_lookup(plate)
    simulate_exit(plate)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Simulate parking traffic for testing")
    parser.add_argument("--action", default="visit",
                        choices=["entry", "check", "lookup", "exit", "visit"])
    parser.add_argument("--plate", default="ABC-123")
    parser.add_argument("--url", default=BACKEND_URL)
    parser.add_argument("--api-key", default=None)
    args = parser.parse_args()

    BACKEND_URL = args.url.rstrip("/")
    if args.action == "entry":
        simulate_entry(args.plate, args.api_key)
    elif args.action == "check":
        simulate_check(args.plate, args.api_key)
    elif args.action == "lookup":
        simulate_lookup(args.plate)
    elif args.action == "exit":
        simulate_exit(args.plate)
    else:
        simulate_visit(args.plate, args.api_key)
