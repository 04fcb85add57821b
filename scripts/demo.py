#!/usr/bin/env python3
"""Demo: send one email of each kind through the mail gateway.

Requires the gateway to be running:
    python -m mail_delivery

Without SMTP_HOST/SMTP_USER/SMTP_PASS the gateway runs in logged mode and
nothing leaves the machine.

Usage:
    python scripts/demo.py [--gateway-url URL] [--to ADDRESS]
"""

import argparse
import sys

import httpx


def _requests(to: str) -> list[tuple[str, dict]]:
    return [
        ("/emails/registration-approved", {
            "to": to,
            "name": "Alice",
            "event_name": "BootFeet 2K26",
            "username": "alice01",
            "password": "change-me-1",
        }),
        ("/emails/credentials", {
            "to": to,
            "name": "Alice",
            "event_name": "BootFeet 2K26",
            "username": "alice01",
            "password": "change-me-1",
        }),
        ("/emails/test-start-reminder", {
            "to": to,
            "name": "Alice",
            "event_name": "BootFeet 2K26",
            "round_name": "Round 1",
            "start_time": "2026-03-01T09:30:00+05:30",
        }),
        ("/emails/result-published", {
            "to": to,
            "name": "Alice",
            "event_name": "BootFeet 2K26",
            "score": 87.5,
            "rank": 4,
        }),
    ]


def main() -> None:
    parser = argparse.ArgumentParser(description="Send demo emails")
    parser.add_argument(
        "--gateway-url",
        default="http://localhost:8000",
        help="Mail gateway base URL (default: http://localhost:8000)",
    )
    parser.add_argument(
        "--to",
        default="alice@example.com",
        help="Recipient address (default: alice@example.com)",
    )
    args = parser.parse_args()

    requests = _requests(args.to)

    with httpx.Client(base_url=args.gateway_url, timeout=130.0) as client:
        try:
            resp = client.get("/health")
        except httpx.ConnectError:
            print(f"Cannot connect to {args.gateway_url}")
            print("Make sure the gateway is running: python -m mail_delivery")
            sys.exit(1)

        if resp.status_code != 200:
            print(f"Gateway unhealthy: {resp.text}")
            sys.exit(1)

        mode = resp.json()["checks"]["transport"]
        print(f"Gateway healthy at {args.gateway_url} (transport: {mode})\n")

        for path, payload in requests:
            resp = client.post(path, json=payload)
            body = resp.json()

            if resp.status_code == 200:
                print(f"  {path:32s}  -> sent    message_id={body['message_id']}")
            else:
                print(f"  {path:32s}  -> ERROR {resp.status_code}: {body}")

    print(f"\nSent {len(requests)} emails.")
    print("\nVerify results:")
    print("  SELECT template_type, status, metadata->>'retry_count', error_message")
    print("    FROM email_logs ORDER BY created_at;")


if __name__ == "__main__":
    main()
