#!/usr/bin/env python3
"""
Smoke-check the request gate of a running dashboard.

Sends one request per declared route without a session (expect 401 / 307) and,
when a session token is given, with the wrong method (expect 405 + Allow header).

Usage:
  python scripts/check_gate.py [--url BASE_URL] [--token SESSION_JWT]
  Or set env: DASHBOARD_URL, TOKEN
"""

import argparse
import os
import sys

import httpx

# (method, path, allowed method)
API_ROUTES = [
    ("POST", "/api/backups/create", "POST"),
    ("DELETE", "/api/backups/delete", "DELETE"),
    ("GET", "/api/backups/download", "GET"),
    ("GET", "/api/backups/list", "GET"),
    ("GET", "/api/pm2/status", "GET"),
]


def check(
    client: httpx.Client,
    method: str,
    path: str,
    expected: int,
    headers: dict[str, str] | None = None,
) -> bool:
    """Send one request; print and return whether the status matched."""
    try:
        r = client.request(method, path, headers=headers)
        code = r.status_code
    except httpx.HTTPError:
        code = -1  # -1 = error
    ok = code == expected
    code_str = str(code) if code >= 0 else "ERR"
    print(f"{'ok  ' if ok else 'FAIL'} {method:6} {path} HTTP {code_str} (expected {expected})")
    return ok


def main() -> None:
    parser = argparse.ArgumentParser(description="Smoke-check the dashboard request gate.")
    parser.add_argument(
        "--url",
        default=os.environ.get("DASHBOARD_URL", "http://localhost:8000"),
        help="Dashboard base URL",
    )
    parser.add_argument(
        "--token",
        default=os.environ.get("TOKEN", ""),
        help="Session token for the allowed identity (or set TOKEN env); enables 405 checks",
    )
    args = parser.parse_args()

    print(f"Checking request gate at {args.url}")
    print("---")

    results: list[bool] = []
    with httpx.Client(base_url=args.url, follow_redirects=False, timeout=10) as client:
        for method, path, _ in API_ROUTES:
            results.append(check(client, method, path, 401))
        results.append(check(client, "GET", "/", 307))
        results.append(check(client, "GET", "/auth/signin", 200))
        results.append(check(client, "GET", "/robots.txt", 200))

        if args.token:
            auth = {"Authorization": f"Bearer {args.token}"}
            for _, path, allowed in API_ROUTES:
                wrong = "PUT" if allowed != "PUT" else "POST"
                results.append(check(client, wrong, path, 405, headers=auth))

    print("---")
    failed = results.count(False)
    print(f"Done. passed={len(results) - failed} failed={failed}")
    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
